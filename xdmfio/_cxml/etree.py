# A small, write-only stand-in for xml.etree. The XDMF document is rewritten after
# every time step, so the output has to be byte-for-byte predictable: 4-space
# indentation, text-only elements on one line, empty elements self-closing, and
# attributes in insertion order. xml.etree's pretty printer does not give all of
# that, and it would build one big string before writing. This one writes straight
# to the file.
from xml.sax.saxutils import escape

INDENT = "    "

_attrib_entities = {'"': "&quot;"}


class Element:
    def __init__(self, name, **kwargs):
        self.name = name
        self.attrib = kwargs
        self._children = []
        self.text = None

    def __len__(self):
        return len(self._children)

    def __iter__(self):
        return iter(self._children)

    def append(self, elem):
        self._children.append(elem)

    def set(self, key, value):
        self.attrib[key] = value

    def get(self, key, default=None):
        return self.attrib.get(key, default)

    def write(self, f, level=0):
        indent = INDENT * level
        kw_list = [
            f'{key}="{escape(str(value), _attrib_entities)}"'
            for key, value in self.attrib.items()
        ]
        tag = " ".join([self.name] + kw_list)

        if not self._children:
            if self.text:
                f.write(f"{indent}<{tag}>{escape(self.text)}</{self.name}>\n")
            else:
                f.write(f"{indent}<{tag}/>\n")
            return

        f.write(f"{indent}<{tag}>\n")
        if self.text:
            f.write(f"{indent}{INDENT}{escape(self.text)}\n")
        for child in self._children:
            child.write(f, level + 1)
        f.write(f"{indent}</{self.name}>\n")


class SubElement(Element):
    def __init__(self, parent, name, **kwargs):
        super().__init__(name, **kwargs)
        parent.append(self)


class ElementTree:
    def __init__(self, root):
        self.root = root

    def write(self, filename, xml_declaration=True):
        with open(filename, "w", encoding="utf-8") as f:
            if xml_declaration:
                f.write('<?xml version="1.0"?>\n')
            self.root.write(f)
