from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike

from .._exceptions import InputError
from .common import numpy_to_xdmf_dtype


class DataAttribute:
    """Semantic shape of the values attached to one mesh entity."""

    def __init__(self, kind: str, size: int, shape: tuple[int, ...] | None = None):
        if size < 1:
            raise InputError(f"Size of data attribute must be positive, not {size}")
        self.kind = kind
        self.size = size
        self.shape = (size,) if shape is None else shape

    @classmethod
    def matrix(cls, num_rows: int, num_cols: int) -> DataAttribute:
        return cls("Matrix", num_rows * num_cols, (num_rows, num_cols))

    @classmethod
    def generic(cls, size: int) -> DataAttribute:
        return cls("Generic", size)

    @property
    def attribute_type(self) -> str:
        # ParaView only recognizes a 6-component array as symmetric tensor if it is
        # written as Matrix.
        if self.kind in ["Scalar", "Vector", "Tensor"]:
            return self.kind
        return "Matrix"

    def __eq__(self, other):
        if not isinstance(other, DataAttribute):
            return NotImplemented
        return (self.kind, self.shape) == (other.kind, other.shape)

    def __hash__(self):
        return hash((self.kind, self.shape))

    def __repr__(self):
        if self.kind == "Matrix":
            return f"DataAttribute.matrix({self.shape[0]}, {self.shape[1]})"
        if self.kind == "Generic":
            return f"DataAttribute.generic({self.size})"
        return f"DataAttribute.{self.kind.upper()}"


DataAttribute.SCALAR = DataAttribute("Scalar", 1)
DataAttribute.VECTOR = DataAttribute("Vector", 3)
DataAttribute.TENSOR = DataAttribute("Tensor", 9)
DataAttribute.TENSOR6 = DataAttribute("Tensor6", 6)

_attributes_by_name = {
    "scalar": DataAttribute.SCALAR,
    "vector": DataAttribute.VECTOR,
    "tensor": DataAttribute.TENSOR,
    "tensor6": DataAttribute.TENSOR6,
}


def to_data_attribute(value) -> DataAttribute:
    if isinstance(value, DataAttribute):
        return value
    try:
        return _attributes_by_name[value.lower()]
    except (AttributeError, KeyError):
        raise InputError(
            f"Unknown data attribute '{value}' "
            f"(use one of {list(_attributes_by_name)} or a DataAttribute)"
        )


class Values:
    """Flat numeric payload of one attribute, plus what XDMF needs to know about it."""

    def __init__(self, data: ArrayLike):
        data = np.asarray(data)
        if data.dtype.name not in numpy_to_xdmf_dtype:
            raise InputError(f"Unsupported data type '{data.dtype.name}'")
        self.data = data.ravel()

    def __len__(self):
        return len(self.data)

    @property
    def number_type(self) -> str:
        return numpy_to_xdmf_dtype[self.data.dtype.name][0]

    @property
    def precision(self) -> str:
        return numpy_to_xdmf_dtype[self.data.dtype.name][1]

    def dimensions(self, attribute: DataAttribute) -> list[int]:
        if attribute.kind == "Scalar":
            return [len(self.data)]
        return [len(self.data) // attribute.size, attribute.size]

    def shaped(self, attribute: DataAttribute) -> np.ndarray:
        return self.data.reshape(self.dimensions(attribute))
