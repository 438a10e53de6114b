"""
Checks on user input. Everything here runs before anything is written, so a failing
call leaves files and writer state untouched.
"""
from __future__ import annotations

import math
import pathlib
import re

import numpy as np

from .._exceptions import InputError
from .cells import check_cells

# ASCII decimal or scientific literal, no whitespace, underscores, inf or nan
_time_pattern = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")
_data_name_pattern = re.compile(r"[A-Za-z0-9_-]+")

invalid_file_name_chars = ["?", "\0", ":", "*", '"', "<", ">", "|"]


def validate_file_name(filename) -> None:
    name = pathlib.Path(filename).name
    if not name:
        raise InputError("File name must not be empty")
    if any(c in name for c in invalid_file_name_chars):
        raise InputError(
            f"File name '{name}' cannot contain the following characters: "
            f"{invalid_file_name_chars}"
        )


def validate_points_and_cells(points: np.ndarray, connectivity: np.ndarray, cell_types):
    if len(points) == 0:
        raise InputError("At least one point is required")

    if len(points) % 3 != 0:
        raise InputError("Points must have 3 dimensions")

    num_points = len(points) // 3
    if len(connectivity) > 0:
        if np.min(connectivity) < 0:
            raise InputError("Connectivity indices must be non-negative")
        max_index = np.max(connectivity)
        if max_index >= num_points:
            raise InputError(
                "Connectivity indices out of bounds for the given points, "
                f"max index: {max_index}, but number of points is {num_points}"
            )

    check_cells(connectivity, cell_types)


def is_valid_time(time: str) -> bool:
    return _time_pattern.fullmatch(time) is not None and math.isfinite(float(time))


def is_valid_data_name(name: str) -> bool:
    # fullmatch on an ASCII class, str.isalnum() would let through other scripts
    return _data_name_pattern.fullmatch(name) is not None


def validate_time(time: str, written_times) -> None:
    if not is_valid_time(time):
        raise InputError(f"Time must be a valid float, and not '{time}'")

    if time in written_times:
        raise InputError(f"Time step '{time}' has already been written")


def check_data_size(data: dict, num_entities: int, label: str) -> None:
    for name, (attribute, values) in data.items():
        expected = num_entities * attribute.size
        if len(values) != expected:
            raise InputError(
                f"Size of {label}-data '{name}' must be {expected}, "
                f"but is {len(values)}"
            )


def validate_data_names(data: dict, label: str) -> None:
    for name in data:
        if not is_valid_data_name(name):
            raise InputError(
                f"Data name '{name}' of {label}-data is not valid, must be non-empty "
                "and contain only alphanumeric characters, underscores or dashes"
            )


def validate_data(
    time: str,
    written_times,
    point_data: dict,
    cell_data: dict,
    num_points: int,
    num_cells: int,
) -> None:
    """`point_data` and `cell_data` map names to (DataAttribute, Values)."""
    validate_time(time, written_times)

    if len(point_data) + len(cell_data) == 0:
        raise InputError("At least one of point_data or cell_data must be provided")

    check_data_size(point_data, num_points, "point")
    check_data_size(cell_data, num_cells, "cell")

    validate_data_names(point_data, "point")
    validate_data_names(cell_data, "cell")
