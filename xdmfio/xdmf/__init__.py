"""
I/O for XDMF time series.
https://xdmf.org/index.php/XDMF_Model_and_Format
"""
from .cells import prepare_cells
from .common import CellType
from .storage import DataStorage, is_hdf5_enabled
from .time_series import TimeSeriesDataWriter, TimeSeriesWriter
from .values import DataAttribute

__all__ = [
    "CellType",
    "DataAttribute",
    "DataStorage",
    "TimeSeriesWriter",
    "TimeSeriesDataWriter",
    "is_hdf5_enabled",
    "prepare_cells",
]
