from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike

from .._exceptions import InputError
from .common import CellType, to_cell_type


def check_cells(connectivity: np.ndarray, cell_types: list[CellType]) -> None:
    expected = sum(cell_type.num_points for cell_type in cell_types)
    if expected != len(connectivity):
        raise InputError(
            "Size of connectivity does not match the expected number based on the "
            f"cell types: {len(connectivity)} != {expected}"
        )


def prepare_cells(connectivity: ArrayLike, cell_types: list) -> np.ndarray:
    """Translate cells into XDMF mixed-topology connectivity.

    `connectivity` lists the point indices of all cells back to back, `cell_types`
    says how many of them belong to each cell. The output is one flat vector
    (cell_type1, p0, p1, ..., cell_type2, p10, p11, ...); polyvertices and polylines
    additionally carry their number of points right after the type, e.g. an edge
    (0, 1) becomes (2, 2, 0, 1).

    <https://xdmf.org/index.php/XDMF_Model_and_Format#Arbitrary>
    """
    connectivity = np.asarray(connectivity, dtype=np.uint64).ravel()
    cell_types = [to_cell_type(t) for t in cell_types]
    check_cells(connectivity, cell_types)

    types = np.array([int(t) for t in cell_types], dtype=np.uint64)
    num_points = np.array([t.num_points for t in cell_types], dtype=np.uint64)
    is_poly = np.array([t.is_poly for t in cell_types], dtype=bool)

    header_length = 1 + is_poly.astype(np.int64)
    cell_length = header_length + num_points.astype(np.int64)
    starts = np.cumsum(cell_length) - cell_length

    out = np.empty(len(connectivity) + len(types) + np.count_nonzero(is_poly), np.uint64)
    is_header = np.zeros(len(out), dtype=bool)

    out[starts] = types
    is_header[starts] = True
    out[starts[is_poly] + 1] = num_points[is_poly]
    is_header[starts[is_poly] + 1] = True

    out[~is_header] = connectivity
    return out
