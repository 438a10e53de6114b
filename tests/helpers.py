import pathlib
from xml.etree import ElementTree as ET

import numpy as np

import xdmfio

# In general:
# Use values with an infinite decimal representation to test precision.

# a line (0, 1) and a triangle (0, 2, 1)
line_tri_mesh = {
    "points": np.array([0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0, 0.0]),
    "connectivity": np.array([0, 1, 0, 2, 1]),
    "cell_types": [xdmfio.CellType.Edge, xdmfio.CellType.Triangle],
}

# 3x3 grid of points with four quads, and eight triangles hanging off the border
quad_tri_mesh = {
    "points": np.array(
        [
            [0.0, 0.0, 0.0],
            [1.0, 0.0, 0.0],
            [2.0, 0.0, 0.0],
            [0.0, 1.0, 0.0],
            [1.0, 1.0, 0.0],
            [2.0, 1.0, 0.0],
            [0.0, 2.0, 0.0],
            [1.0, 2.0, 0.0],
            [2.0, 2.0, 0.0],
            [0.5, -0.5, 0.2],
            [-0.5, 0.5, 0.2],
            [1.5, -0.5, 0.2],
            [2.5, 0.5, 0.2],
            [0.5, 1.5, 0.2],
            [0.5, 2.5, 0.2],
            [1.5, 2.5, 0.2],
            [2.5, 1.5, 0.2],
        ]
    ),
    "connectivity": np.array(
        [
            0, 1, 4, 3, 1, 2, 5, 4, 3, 4, 7, 6, 4, 5, 8, 7,
            0, 1, 9, 3, 0, 10, 1, 2, 11, 2, 5, 12,
            6, 3, 13, 6, 7, 14, 7, 8, 15, 5, 8, 16,
        ]
    ),  # fmt: skip
    "cell_types": 4 * [xdmfio.CellType.Quadrilateral] + 8 * [xdmfio.CellType.Triangle],
}

storage_variants = ["ascii", "ascii-inline", "hdf5-single-file", "hdf5-multiple-files"]


def write_mesh(filename, mesh, data_storage, **kwargs):
    writer = xdmfio.TimeSeriesWriter(filename, data_storage, **kwargs)
    return writer.write_mesh(mesh["points"], (mesh["connectivity"], mesh["cell_types"]))


def parse_xdmf(filename):
    return ET.parse(pathlib.Path(filename)).getroot()


def time_grids(root):
    collection = root.find("Domain/Grid")
    assert collection.get("CollectionType") == "Temporal"
    return list(collection)


def read_data_item(data_item, xdmf_filename):
    """Resolve the content of a DataItem the way a reader would, as flat array."""
    dirpath = pathlib.Path(xdmf_filename).resolve().parent
    data_format = data_item.get("Format")
    if data_format == "HDF":
        import h5py

        filename, h5path = data_item.text.strip().split(":")
        with h5py.File(dirpath / filename, "r") as f:
            return f[h5path][()].ravel()

    includes = list(data_item)
    if includes:
        text = (dirpath / includes[0].get("href")).read_text()
    else:
        text = data_item.text
    dtype = np.uint64 if data_item.get("NumberType") == "UInt" else np.float64
    return np.array(text.split(), dtype=dtype)
