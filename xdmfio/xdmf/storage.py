"""
Backends for the heavy data. The XDMF document only describes the mesh and the
fields; the actual numbers go wherever the chosen `DataStorage` puts them, and the
backend hands back what the DataItem has to contain to find them again.
"""
from __future__ import annotations

import enum
import importlib.util
import pathlib

import numpy as np

from .._common import makedirs_mpi_safe, warn
from .._exceptions import CapabilityError, InputError, ResourceStateError
from .common import array_to_string, array_to_writer, center_to_data_tag
from .elements import XInclude

# Inline data makes the XML file slow to parse for anything bigger than this.
INLINE_WARNING_SIZE = 100_000


class DataStorage(enum.Enum):
    ASCII = "Ascii"
    ASCII_INLINE = "AsciiInline"
    HDF5_SINGLE_FILE = "Hdf5SingleFile"
    HDF5_MULTIPLE_FILES = "Hdf5MultipleFiles"

    @classmethod
    def from_string(cls, string: str) -> DataStorage:
        try:
            return _data_storage_names[string.lower()]
        except KeyError:
            options = ", ".join(f"'{m.value}'" for m in cls)
            raise InputError(
                f"Invalid DataStorage variant: '{string}'. Valid options are: {options}"
            )


_data_storage_names = {
    "ascii": DataStorage.ASCII,
    "asciiinline": DataStorage.ASCII_INLINE,
    "ascii_inline": DataStorage.ASCII_INLINE,
    "ascii-inline": DataStorage.ASCII_INLINE,
    "hdf5singlefile": DataStorage.HDF5_SINGLE_FILE,
    "hdf5_single_file": DataStorage.HDF5_SINGLE_FILE,
    "hdf5-single-file": DataStorage.HDF5_SINGLE_FILE,
    "hdf5multiplefiles": DataStorage.HDF5_MULTIPLE_FILES,
    "hdf5_multiple_files": DataStorage.HDF5_MULTIPLE_FILES,
    "hdf5-multiple-files": DataStorage.HDF5_MULTIPLE_FILES,
}


def is_hdf5_enabled() -> bool:
    return importlib.util.find_spec("h5py") is not None


def default_data_storage() -> DataStorage:
    if is_hdf5_enabled():
        return DataStorage.HDF5_SINGLE_FILE
    return DataStorage.ASCII_INLINE


def _import_h5py(data_storage: DataStorage):
    try:
        import h5py
    except ImportError:
        raise CapabilityError(
            f"Using {data_storage.value} DataStorage requires h5py."
        ) from None
    return h5py


class DataWriter:
    """Interface for writing the heavy data.

    `write_mesh` and `write_data` return what goes into the DataItem: a string (the
    data itself or an array-store path) or an `XInclude`. All `write_data` calls of
    one time step are wrapped in `write_data_initialize` / `write_data_finalize`.
    """

    data_format = "XML"
    data_storage: DataStorage
    uses_xinclude = False

    def write_mesh(self, points: np.ndarray, cells: np.ndarray):
        raise NotImplementedError

    def write_data(self, name: str, center: str, values: np.ndarray):
        raise NotImplementedError

    def write_data_initialize(self, time: str) -> None:
        pass

    def write_data_finalize(self) -> None:
        pass

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass


class AsciiInlineWriter(DataWriter):
    data_storage = DataStorage.ASCII_INLINE

    def __init__(self):
        self._warned = False

    def _to_string(self, values):
        if values.size > INLINE_WARNING_SIZE and not self._warned:
            warn(
                f"{self.data_storage.value} data storage is only meant for small "
                f"datasets, got {values.size} values."
            )
            self._warned = True
        return array_to_string(values)

    def write_mesh(self, points, cells):
        return self._to_string(points), self._to_string(cells)

    def write_data(self, name, center, values):
        return self._to_string(values)


class AsciiWriter(DataWriter):
    """One text file per array, in a directory next to the XDMF file."""

    data_storage = DataStorage.ASCII
    uses_xinclude = True

    def __init__(self, filename):
        self.txt_dir = pathlib.Path(filename).with_suffix(".txt")
        makedirs_mpi_safe(self.txt_dir)
        self.write_time = None

    def _write(self, filename, values):
        with open(self.txt_dir / filename, "w") as f:
            array_to_writer(values, f)
        # relative to the XDMF file
        return XInclude(f"{self.txt_dir.name}/{filename}")

    def write_mesh(self, points, cells):
        return self._write("points.txt", points), self._write("cells.txt", cells)

    def write_data(self, name, center, values):
        if self.write_time is None:
            raise ResourceStateError("Writing data was not initialized")
        tag = center_to_data_tag[center]
        return self._write(f"data_t_{self.write_time}_{tag}_{name}.txt", values)

    def write_data_initialize(self, time):
        if self.write_time is not None:
            raise ResourceStateError("Writing data was already initialized")
        self.write_time = time

    def write_data_finalize(self):
        if self.write_time is None:
            raise ResourceStateError("Writing data was not initialized")
        self.write_time = None


class _Hdf5Writer(DataWriter):
    data_format = "HDF"

    def __init__(self, compression=None, compression_opts=4):
        self.h5py = _import_h5py(self.data_storage)
        self.compression = compression
        self.compression_opts = None if compression is None else compression_opts

    def _create_dataset(self, group, name, values):
        group.create_dataset(
            name,
            data=values,
            compression=self.compression,
            compression_opts=self.compression_opts,
        )


class SingleFileHdf5Writer(_Hdf5Writer):
    """Everything in one HDF5 file, the mesh under /mesh and the fields under
    /data/t_<time>/<center>/<name>.
    """

    data_storage = DataStorage.HDF5_SINGLE_FILE

    def __init__(self, filename, compression=None, compression_opts=4):
        super().__init__(compression, compression_opts)
        self.h5_filename = pathlib.Path(filename).with_suffix(".h5")
        self.h5_file = self.h5py.File(self.h5_filename, "w")
        self.write_time = None

    def _path(self, dataset_path):
        return f"{self.h5_filename.name}:/{dataset_path}"

    def _data_group_path(self, time):
        return f"data/t_{time}"

    def write_mesh(self, points, cells):
        group = self.h5_file.create_group("mesh")
        self._create_dataset(group, "points", points)
        self._create_dataset(group, "cells", cells)
        return self._path("mesh/points"), self._path("mesh/cells")

    def write_data(self, name, center, values):
        if self.write_time is None:
            raise ResourceStateError("Writing data was not initialized")
        tag = center_to_data_tag[center]
        group_path = f"{self._data_group_path(self.write_time)}/{tag}"
        group = self.h5_file.require_group(group_path)
        self._create_dataset(group, name, values)
        return self._path(f"{group_path}/{name}")

    def write_data_initialize(self, time):
        if self.write_time is not None:
            raise ResourceStateError("Writing data was already initialized")
        # leftovers of an earlier, failed attempt at this time step
        group_path = self._data_group_path(time)
        if group_path in self.h5_file:
            del self.h5_file[group_path]
        self.write_time = time

    def write_data_finalize(self):
        if self.write_time is None:
            raise ResourceStateError("Writing data was not initialized")
        self.write_time = None

    def flush(self):
        self.h5_file.flush()

    def close(self):
        if self.h5_file is not None:
            self.h5_file.close()
            self.h5_file = None


class MultipleFilesHdf5Writer(_Hdf5Writer):
    """The mesh in mesh.h5 and one data_t_<time>.h5 per time step, all in a directory
    next to the XDMF file.
    """

    data_storage = DataStorage.HDF5_MULTIPLE_FILES

    def __init__(self, filename, compression=None, compression_opts=4):
        super().__init__(compression, compression_opts)
        self.h5_dir = pathlib.Path(filename).with_suffix(".h5")
        makedirs_mpi_safe(self.h5_dir)
        self.h5_file = None

    def _path(self, h5_filename, dataset_path):
        return f"{self.h5_dir.name}/{h5_filename}:/{dataset_path}"

    def write_mesh(self, points, cells):
        with self.h5py.File(self.h5_dir / "mesh.h5", "w") as f:
            self._create_dataset(f, "points", points)
            self._create_dataset(f, "cells", cells)
        return self._path("mesh.h5", "points"), self._path("mesh.h5", "cells")

    def write_data(self, name, center, values):
        if self.h5_file is None:
            raise ResourceStateError("Writing data was not initialized")
        tag = center_to_data_tag[center]
        group = self.h5_file.require_group(tag)
        self._create_dataset(group, name, values)
        h5_filename = pathlib.Path(self.h5_file.filename).name
        return self._path(h5_filename, f"{tag}/{name}")

    def write_data_initialize(self, time):
        if self.h5_file is not None:
            raise ResourceStateError("Writing data was already initialized")
        self.h5_file = self.h5py.File(self.h5_dir / f"data_t_{time}.h5", "w")

    def write_data_finalize(self):
        if self.h5_file is None:
            raise ResourceStateError("Writing data was not initialized")
        self.h5_file.close()
        self.h5_file = None

    def close(self):
        if self.h5_file is not None:
            self.h5_file.close()
            self.h5_file = None


def create_writer(filename, data_storage: DataStorage, **kwargs) -> DataWriter:
    # compression options only apply to the array-store backends
    if kwargs and data_storage in (DataStorage.ASCII, DataStorage.ASCII_INLINE):
        raise InputError(
            f"{data_storage.value} DataStorage takes no options, got {sorted(kwargs)}"
        )
    if data_storage is DataStorage.ASCII_INLINE:
        return AsciiInlineWriter()
    if data_storage is DataStorage.ASCII:
        return AsciiWriter(filename)
    if data_storage is DataStorage.HDF5_SINGLE_FILE:
        return SingleFileHdf5Writer(filename, **kwargs)
    return MultipleFilesHdf5Writer(filename, **kwargs)
