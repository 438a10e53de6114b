from . import xdmf
from .__about__ import __version__
from ._common import makedirs_mpi_safe
from ._exceptions import CapabilityError, InputError, ResourceStateError, WriteError
from .xdmf import (
    CellType,
    DataAttribute,
    DataStorage,
    TimeSeriesDataWriter,
    TimeSeriesWriter,
    is_hdf5_enabled,
)

__all__ = [
    "xdmf",
    "CellType",
    "DataAttribute",
    "DataStorage",
    "TimeSeriesWriter",
    "TimeSeriesDataWriter",
    "is_hdf5_enabled",
    "makedirs_mpi_safe",
    "CapabilityError",
    "InputError",
    "ResourceStateError",
    "WriteError",
    "__version__",
]
