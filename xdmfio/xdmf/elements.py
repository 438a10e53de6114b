"""
In-memory model of an XDMF document and its serialization.
<https://xdmf.org/index.php/XDMF_Model_and_Format>

Every element knows how to turn itself into an `_cxml` element via `to_element()`.
DataItems may point to another DataItem of the Domain by name instead of holding data
themselves; that is how the mesh is shared by all time steps.
"""
from __future__ import annotations

import copy

from .._common import write_xml
from .._cxml import etree as ET
from .._exceptions import InputError
from .common import (
    XINCLUDE_NAMESPACE,
    attribute_types,
    center_to_data_tag,
    collection_types,
    data_formats,
    geometry_types,
    grid_types,
    number_types,
)


def _check(value, options, what):
    if value is not None and value not in options:
        raise InputError(f"Unknown {what} '{value}' (use one of {list(options)})")


class Dimensions:
    """Shape of a DataItem, written as space-separated extents."""

    def __init__(self, extents):
        self.extents = [int(e) for e in extents]
        if any(e < 0 for e in self.extents):
            raise InputError(f"Dimensions must not be negative, got {self.extents}")

    @classmethod
    def from_string(cls, string: str) -> Dimensions:
        return cls(int(s) for s in string.split())

    def __str__(self):
        return " ".join(str(e) for e in self.extents)

    def __repr__(self):
        return f"Dimensions({self.extents})"

    def __eq__(self, other):
        if not isinstance(other, Dimensions):
            return NotImplemented
        return self.extents == other.extents

    def __len__(self):
        return len(self.extents)

    def __iter__(self):
        return iter(self.extents)


class XInclude:
    """Pointer to a file whose content is pulled into the document by the reader."""

    def __init__(self, href: str, parse_text: bool = True):
        self.href = href
        # xml is the default for xi:include
        self.parse = "text" if parse_text else None

    def __eq__(self, other):
        if not isinstance(other, XInclude):
            return NotImplemented
        return (self.href, self.parse) == (other.href, other.parse)

    def __repr__(self):
        return f"XInclude({self.href!r}, parse={self.parse!r})"

    def to_element(self):
        elem = ET.Element("xi:include", href=self.href)
        if self.parse is not None:
            elem.set("parse", self.parse)
        return elem


class DataItem:
    def __init__(
        self,
        content: str | XInclude = "",
        name: str | None = None,
        dimensions: Dimensions | list[int] | None = None,
        number_type: str | None = None,
        data_format: str | None = None,
        precision: str | int | None = None,
        reference: str | None = None,
    ):
        _check(number_type, number_types, "number type")
        _check(data_format, data_formats, "data format")
        if reference is not None and any(
            v is not None for v in [dimensions, number_type, data_format, precision]
        ):
            raise InputError(
                "A referencing DataItem takes its dimensions, number type, format "
                "and precision from the DataItem it points to"
            )
        if dimensions is not None and not isinstance(dimensions, Dimensions):
            dimensions = Dimensions(dimensions)

        self.content = content
        self.name = name
        self.dimensions = dimensions
        self.number_type = number_type
        self.data_format = data_format
        self.precision = None if precision is None else str(precision)
        self.reference = reference

    @classmethod
    def new_reference(cls, source: DataItem) -> DataItem:
        if not source.name:
            raise InputError("Only named DataItems can be referenced")
        return cls(reference=source.name)

    @property
    def reference_path(self) -> str | None:
        if self.reference is None:
            return None
        return f'/Xdmf/Domain/DataItem[@Name="{self.reference}"]'

    def to_element(self):
        attrib = {
            "Name": self.name,
            "Dimensions": None if self.dimensions is None else str(self.dimensions),
            "NumberType": self.number_type,
            "Format": self.data_format,
            "Precision": self.precision,
        }
        elem = ET.Element(
            "DataItem", **{k: v for k, v in attrib.items() if v is not None}
        )
        if self.reference is not None:
            elem.set("Reference", "XML")
            elem.text = self.reference_path
        elif isinstance(self.content, XInclude):
            elem.append(self.content.to_element())
        else:
            elem.text = self.content
        return elem


class Geometry:
    def __init__(self, data_item: DataItem, geometry_type: str = "XYZ"):
        _check(geometry_type, geometry_types, "geometry type")
        self.geometry_type = geometry_type
        self.data_item = data_item

    def to_element(self):
        elem = ET.Element("Geometry", GeometryType=self.geometry_type)
        elem.append(self.data_item.to_element())
        return elem


class Topology:
    def __init__(
        self, data_item: DataItem, number_of_elements: int, topology_type="Mixed"
    ):
        self.topology_type = topology_type
        self.number_of_elements = int(number_of_elements)
        self.data_item = data_item

    def to_element(self):
        elem = ET.Element(
            "Topology",
            TopologyType=self.topology_type,
            NumberOfElements=str(self.number_of_elements),
        )
        elem.append(self.data_item.to_element())
        return elem


class Attribute:
    def __init__(
        self,
        name: str,
        data_items: list[DataItem],
        attribute_type: str = "Scalar",
        center: str = "Node",
    ):
        _check(attribute_type, attribute_types, "attribute type")
        _check(center, center_to_data_tag, "center")
        self.name = name
        self.attribute_type = attribute_type
        self.center = center
        self.data_items = list(data_items)

    def to_element(self):
        elem = ET.Element(
            "Attribute",
            Name=self.name,
            AttributeType=self.attribute_type,
            Center=self.center,
        )
        for data_item in self.data_items:
            elem.append(data_item.to_element())
        return elem


class Time:
    def __init__(self, value):
        self.value = str(value)

    def to_element(self):
        return ET.Element("Time", Value=self.value)


class Grid:
    def __init__(
        self,
        name: str,
        grid_type: str = "Uniform",
        collection_type: str | None = None,
        geometry: Geometry | None = None,
        topology: Topology | None = None,
        grids: list[Grid] | None = None,
        time: Time | None = None,
        attributes: list[Attribute] | None = None,
    ):
        _check(grid_type, grid_types, "grid type")
        _check(collection_type, collection_types, "collection type")
        self.name = name
        self.grid_type = grid_type
        self.collection_type = collection_type
        self.geometry = geometry
        self.topology = topology
        self.grids = grids
        self.time = time
        self.attributes = attributes

    @classmethod
    def uniform(cls, name: str, geometry: Geometry, topology: Topology) -> Grid:
        return cls(name, "Uniform", geometry=geometry, topology=topology)

    @classmethod
    def collection(
        cls, name: str, collection_type: str = "Spatial", grids: list[Grid] | None = None
    ) -> Grid:
        return cls(
            name, "Collection", collection_type=collection_type, grids=grids or []
        )

    @classmethod
    def tree(cls, name: str, grids: list[Grid] | None = None) -> Grid:
        return cls(name, "Tree", grids=grids or [])

    def copy(self) -> Grid:
        # Geometry and Topology are shared, everything that is per-grid gets its own
        # container.
        grid = copy.copy(self)
        if self.grids is not None:
            grid.grids = list(self.grids)
        if self.attributes is not None:
            grid.attributes = list(self.attributes)
        return grid

    def to_element(self):
        elem = ET.Element("Grid", Name=self.name, GridType=self.grid_type)
        if self.collection_type is not None:
            elem.set("CollectionType", self.collection_type)
        if self.geometry is not None:
            elem.append(self.geometry.to_element())
        if self.topology is not None:
            elem.append(self.topology.to_element())
        for grid in self.grids or []:
            elem.append(grid.to_element())
        if self.time is not None:
            elem.append(self.time.to_element())
        for attribute in self.attributes or []:
            elem.append(attribute.to_element())
        return elem


class Information:
    def __init__(self, name: str, value):
        self.name = name
        self.value = str(value)

    def to_element(self):
        return ET.Element("Information", Name=self.name, Value=self.value)


class Domain:
    def __init__(
        self,
        grids: list[Grid] | None = None,
        data_items: list[DataItem] | None = None,
    ):
        self.grids = [] if grids is None else grids
        # DataItems shared across grids, addressed by name
        self.data_items = [] if data_items is None else data_items

    def get_data_item(self, name: str) -> DataItem:
        for data_item in self.data_items:
            if data_item.name == name:
                return data_item
        raise KeyError(name)

    def to_element(self):
        elem = ET.Element("Domain")
        for grid in self.grids:
            elem.append(grid.to_element())
        for data_item in self.data_items:
            elem.append(data_item.to_element())
        return elem


class Xdmf:
    def __init__(
        self,
        domain: Domain | None = None,
        information: list[Information] | None = None,
        version: str = "3.0",
        xinclude: bool = False,
    ):
        self.domain = Domain() if domain is None else domain
        self.information = [] if information is None else information
        self.version = version
        # only needed if some DataItem uses xi:include
        self.xinclude = xinclude

    def to_element(self):
        root = ET.Element("Xdmf", Version=self.version)
        if self.xinclude:
            root.set("xmlns:xi", XINCLUDE_NAMESPACE)
        root.append(self.domain.to_element())
        for info in self.information:
            root.append(info.to_element())
        return root

    def write(self, filename) -> None:
        write_xml(filename, self.to_element())
