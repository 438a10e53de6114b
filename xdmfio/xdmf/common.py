from __future__ import annotations

import enum

import numpy as np

from .._exceptions import InputError

numpy_to_xdmf_dtype = {
    "int8": ("Int", "1"),
    "int16": ("Int", "2"),
    "int32": ("Int", "4"),
    "int64": ("Int", "8"),
    "uint8": ("UInt", "1"),
    "uint16": ("UInt", "2"),
    "uint32": ("UInt", "4"),
    "uint64": ("UInt", "8"),
    "float32": ("Float", "4"),
    "float64": ("Float", "8"),
}

number_types = ("Float", "Int", "UInt", "Char", "UChar")
data_formats = ("XML", "HDF", "Binary")
attribute_types = ("Scalar", "Vector", "Tensor", "Tensor6", "Matrix")
geometry_types = ("XYZ", "XY")
grid_types = ("Uniform", "Collection", "Tree", "SubSet")
collection_types = ("Spatial", "Temporal")

# Where the values of an attribute live, and the tag used for it in side files and
# array-store groups.
center_to_data_tag = {
    "Node": "point_data",
    "Cell": "cell_data",
    "Edge": "edge_data",
    "Face": "face_data",
    "Grid": "grid_data",
    "Other": "other_data",
}

XINCLUDE_NAMESPACE = "http://www.w3.org/2001/XInclude"


# Check out
# <https://gitlab.kitware.com/xdmf/xdmf/blob/master/XdmfTopologyType.cpp>
# for the list of indices.
class CellType(enum.IntEnum):
    Vertex = 0x1
    Edge = 0x2
    Triangle = 0x4
    Quadrilateral = 0x5
    Tetrahedron = 0x6
    Pyramid = 0x7
    Wedge = 0x8
    Hexahedron = 0x9
    Edge3 = 0x22
    Quadrilateral9 = 0x23
    Triangle6 = 0x24
    Quadrilateral8 = 0x25
    Tetrahedron10 = 0x26
    Pyramid13 = 0x27
    Wedge15 = 0x28
    Wedge18 = 0x29
    Hexahedron20 = 0x30
    Hexahedron24 = 0x31
    Hexahedron27 = 0x32

    @property
    def num_points(self) -> int:
        return cell_type_to_num_points[self]

    @property
    def is_poly(self) -> bool:
        # Polyvertex and polyline cells carry their point count in the mixed
        # connectivity.
        return self in (CellType.Vertex, CellType.Edge)


cell_type_to_num_points = {
    CellType.Vertex: 1,
    CellType.Edge: 2,
    CellType.Triangle: 3,
    CellType.Quadrilateral: 4,
    CellType.Tetrahedron: 4,
    CellType.Pyramid: 5,
    CellType.Wedge: 6,
    CellType.Hexahedron: 8,
    CellType.Edge3: 3,
    CellType.Quadrilateral9: 9,
    CellType.Triangle6: 6,
    CellType.Quadrilateral8: 8,
    CellType.Tetrahedron10: 10,
    CellType.Pyramid13: 13,
    CellType.Wedge15: 15,
    CellType.Wedge18: 18,
    CellType.Hexahedron20: 20,
    CellType.Hexahedron24: 24,
    CellType.Hexahedron27: 27,
}


def to_cell_type(value) -> CellType:
    try:
        return CellType(value)
    except ValueError:
        raise InputError(f"Unknown cell type '{value}'")


# Downstream readers depend on this exact precision, don't shorten it.
float_precision = {
    "float32": 7,
    "float64": 16,
}

_non_finite = {"nan": "NaN", "inf": "inf", "-inf": "-inf"}


def _format_float(value: float, precision: int) -> str:
    if not np.isfinite(value):
        return _non_finite[str(value)]
    mantissa, exponent = f"{value:.{precision}e}".split("e")
    # 1.5e-07 -> 1.5e-7, 2.0e+01 -> 2.0e1
    return f"{mantissa}e{int(exponent)}"


def format_numbers(values: np.ndarray) -> list[str]:
    values = np.asarray(values).ravel()
    if values.dtype.kind == "f":
        precision = float_precision.get(values.dtype.name, 16)
        return [_format_float(float(v), precision) for v in values]
    if values.dtype.kind in ["i", "u"]:
        return [str(v) for v in values.tolist()]
    raise InputError(f"Cannot format values of type {values.dtype.name}")


def array_to_string(values: np.ndarray) -> str:
    return " ".join(format_numbers(values))


def array_to_writer(values: np.ndarray, f) -> None:
    f.write(array_to_string(values))
    f.write("\n")
