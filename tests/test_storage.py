import sys

import numpy as np
import pytest

import xdmfio
from xdmfio import DataStorage
from xdmfio.xdmf import storage
from xdmfio.xdmf.elements import XInclude
from xdmfio.xdmf.storage import (
    AsciiInlineWriter,
    AsciiWriter,
    create_writer,
    default_data_storage,
    is_hdf5_enabled,
)


@pytest.mark.parametrize(
    "string,ref",
    [
        ("Ascii", DataStorage.ASCII),
        ("ascii", DataStorage.ASCII),
        ("AsciiInline", DataStorage.ASCII_INLINE),
        ("ascii-inline", DataStorage.ASCII_INLINE),
        ("Hdf5SingleFile", DataStorage.HDF5_SINGLE_FILE),
        ("hdf5_single_file", DataStorage.HDF5_SINGLE_FILE),
        ("Hdf5MultipleFiles", DataStorage.HDF5_MULTIPLE_FILES),
        ("hdf5-multiple-files", DataStorage.HDF5_MULTIPLE_FILES),
    ],
)
def test_from_string(string, ref):
    assert DataStorage.from_string(string) is ref


def test_from_string_invalid():
    with pytest.raises(xdmfio.InputError) as e:
        DataStorage.from_string("Binary")
    assert str(e.value) == (
        "Invalid DataStorage variant: 'Binary'. Valid options are: "
        "'Ascii', 'AsciiInline', 'Hdf5SingleFile', 'Hdf5MultipleFiles'"
    )


def test_without_h5py(monkeypatch, tmp_path):
    monkeypatch.setitem(sys.modules, "h5py", None)
    assert not is_hdf5_enabled()
    assert default_data_storage() is DataStorage.ASCII_INLINE
    with pytest.raises(xdmfio.CapabilityError) as e:
        create_writer(tmp_path / "out.xdmf", DataStorage.HDF5_SINGLE_FILE)
    assert str(e.value) == "Using Hdf5SingleFile DataStorage requires h5py."
    with pytest.raises(xdmfio.CapabilityError):
        create_writer(tmp_path / "out.xdmf", DataStorage.HDF5_MULTIPLE_FILES)


def test_default():
    if is_hdf5_enabled():
        assert default_data_storage() is DataStorage.HDF5_SINGLE_FILE
    else:
        assert default_data_storage() is DataStorage.ASCII_INLINE


def test_ascii_inline():
    writer = AsciiInlineWriter()
    points, cells = writer.write_mesh(
        np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]]), np.array([2, 2, 0, 1])
    )
    zero = "0.0000000000000000e0"
    one = "1.0000000000000000e0"
    assert points == " ".join([zero, zero, zero, one, zero, zero])
    assert cells == "2 2 0 1"
    assert writer.write_data("T", "Node", np.array([1.0])) == one


def test_ascii_inline_warning(monkeypatch, capsys):
    monkeypatch.setattr(storage, "INLINE_WARNING_SIZE", 2)
    writer = AsciiInlineWriter()
    writer.write_data("T", "Node", np.zeros(3))
    writer.write_data("T", "Node", np.zeros(3))
    err = capsys.readouterr().err
    assert err.count("Warning") == 1


def test_ascii(tmp_path):
    writer = AsciiWriter(tmp_path / "out.xdmf")
    assert (tmp_path / "out.txt").is_dir()

    points, cells = writer.write_mesh(np.zeros((1, 3)), np.array([1, 1, 0]))
    assert points == XInclude("out.txt/points.txt")
    assert cells == XInclude("out.txt/cells.txt")
    assert (tmp_path / "out.txt" / "cells.txt").read_text() == "1 1 0\n"

    writer.write_data_initialize("0.5")
    ref = writer.write_data("T", "Cell", np.array([1.0]))
    writer.write_data_finalize()
    assert ref == XInclude("out.txt/data_t_0.5_cell_data_T.txt")
    filename = tmp_path / "out.txt" / "data_t_0.5_cell_data_T.txt"
    assert filename.read_text() == "1.0000000000000000e0\n"


def test_ascii_state(tmp_path):
    writer = AsciiWriter(tmp_path / "out.xdmf")
    with pytest.raises(xdmfio.ResourceStateError, match="not initialized"):
        writer.write_data("T", "Node", np.zeros(1))
    with pytest.raises(xdmfio.ResourceStateError, match="not initialized"):
        writer.write_data_finalize()

    writer.write_data_initialize("1.0")
    with pytest.raises(xdmfio.ResourceStateError, match="already initialized"):
        writer.write_data_initialize("2.0")


def test_hdf5_single_file(tmp_path):
    h5py = pytest.importorskip("h5py")

    writer = create_writer(tmp_path / "out.xdmf", DataStorage.HDF5_SINGLE_FILE)
    points, cells = writer.write_mesh(np.zeros((2, 3)), np.array([2, 2, 0, 1]))
    assert points == "out.h5:/mesh/points"
    assert cells == "out.h5:/mesh/cells"

    with pytest.raises(xdmfio.ResourceStateError):
        writer.write_data("T", "Node", np.zeros(2))

    writer.write_data_initialize("1.0")
    ref = writer.write_data("u", "Node", np.ones((2, 3)))
    writer.write_data_finalize()
    writer.close()
    # closing twice is fine
    writer.close()
    assert ref == "out.h5:/data/t_1.0/point_data/u"

    with h5py.File(tmp_path / "out.h5", "r") as f:
        assert f["mesh/points"].shape == (2, 3)
        assert f["mesh/cells"][()].tolist() == [2, 2, 0, 1]
        assert np.array_equal(f["data/t_1.0/point_data/u"][()], np.ones((2, 3)))


def test_hdf5_compression(tmp_path):
    h5py = pytest.importorskip("h5py")

    writer = create_writer(
        tmp_path / "out.xdmf",
        DataStorage.HDF5_SINGLE_FILE,
        compression="gzip",
        compression_opts=9,
    )
    writer.write_mesh(np.zeros((10, 3)), np.arange(10, dtype=np.uint64))
    writer.close()

    with h5py.File(tmp_path / "out.h5", "r") as f:
        assert f["mesh/points"].compression == "gzip"
        assert f["mesh/points"].compression_opts == 9


def test_hdf5_multiple_files(tmp_path):
    h5py = pytest.importorskip("h5py")

    writer = create_writer(tmp_path / "out.xdmf", DataStorage.HDF5_MULTIPLE_FILES)
    assert (tmp_path / "out.h5").is_dir()

    points, cells = writer.write_mesh(np.zeros((2, 3)), np.array([2, 2, 0, 1]))
    assert points == "out.h5/mesh.h5:/points"
    assert cells == "out.h5/mesh.h5:/cells"

    writer.write_data_initialize("0.5")
    with pytest.raises(xdmfio.ResourceStateError):
        writer.write_data_initialize("0.5")
    ref = writer.write_data("id", "Cell", np.array([3, 4]))
    writer.write_data_finalize()
    writer.close()
    assert ref == "out.h5/data_t_0.5.h5:/cell_data/id"

    with h5py.File(tmp_path / "out.h5" / "data_t_0.5.h5", "r") as f:
        assert f["cell_data/id"][()].tolist() == [3, 4]


@pytest.mark.parametrize("data_storage", [DataStorage.ASCII, DataStorage.ASCII_INLINE])
def test_ascii_options(data_storage, tmp_path):
    with pytest.raises(xdmfio.InputError) as e:
        create_writer(tmp_path / "out.xdmf", data_storage, compression="gzip")
    assert str(e.value) == (
        f"{data_storage.value} DataStorage takes no options, got ['compression']"
    )
    assert not (tmp_path / "out.txt").exists()
