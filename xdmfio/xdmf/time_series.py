"""
Writing a series of time steps to XDMF.

The mesh is written once and then referenced from every time step, which keeps both
the files small and the writing fast. The concept follows meshio's
TimeSeriesWriter, split into two stages:

    writer = xdmfio.TimeSeriesWriter("out/results", "hdf5-single-file")
    with writer.write_mesh(points, (connectivity, cell_types)) as data_writer:
        for t, temperature in steps:
            data_writer.write_data(
                t, point_data={"T": (xdmfio.DataAttribute.SCALAR, temperature)}
            )

After every call the XDMF file on disk is complete and valid.
"""
from __future__ import annotations

import numbers
import pathlib

import numpy as np
from numpy.typing import ArrayLike

from ..__about__ import __version__
from .._common import makedirs_mpi_safe
from .._exceptions import InputError, ResourceStateError
from .cells import prepare_cells
from .common import to_cell_type
from .elements import (
    Attribute,
    DataItem,
    Domain,
    Geometry,
    Grid,
    Information,
    Time,
    Topology,
    Xdmf,
)
from .storage import DataStorage, DataWriter, create_writer, default_data_storage
from .validation import (
    validate_data,
    validate_file_name,
    validate_points_and_cells,
    validate_time,
)
from .values import Values, to_data_attribute


class TimeSeriesWriter:
    def __init__(self, filename, data_storage=None, **storage_options) -> None:
        validate_file_name(filename)

        if data_storage is None:
            data_storage = default_data_storage()
        elif not isinstance(data_storage, DataStorage):
            data_storage = DataStorage.from_string(data_storage)

        self.filename = pathlib.Path(filename).with_suffix(".xdmf")
        makedirs_mpi_safe(self.filename.parent)

        self.data_storage = data_storage
        self._writer = create_writer(self.filename, data_storage, **storage_options)

    def __enter__(self):
        return self

    def __exit__(self, *_):
        self.close()

    def close(self) -> None:
        # After write_mesh the backend belongs to the TimeSeriesDataWriter.
        if self._writer is not None:
            self._writer.close()
            self._writer = None

    def write_mesh(
        self,
        points: ArrayLike,
        cells: tuple[ArrayLike, list],
    ) -> TimeSeriesDataWriter:
        """Write the mesh and return the writer for the time steps.

        `points` are the flat (or n-by-3) point coordinates, `cells` is a tuple of the
        flat connectivity and the type of each cell. This writer can't be used
        afterwards.
        """
        if self._writer is None:
            raise ResourceStateError(
                "The mesh has already been written, "
                "use the returned TimeSeriesDataWriter"
            )

        connectivity, cell_types = cells
        points = np.asarray(points, dtype=np.float64).ravel()
        connectivity = np.asarray(connectivity).ravel()
        cell_types = [to_cell_type(t) for t in cell_types]

        validate_points_and_cells(points, connectivity, cell_types)

        prepared_cells = prepare_cells(connectivity, cell_types)

        writer = self._writer
        self._writer = None

        try:
            return self._write_mesh(
                writer, points.reshape(-1, 3), prepared_cells, len(cell_types)
            )
        except BaseException:
            # nobody else holds the backend at this point
            writer.close()
            raise

    def _write_mesh(
        self,
        writer: DataWriter,
        points: np.ndarray,
        prepared_cells: np.ndarray,
        num_cells: int,
    ) -> TimeSeriesDataWriter:
        points_content, cells_content = writer.write_mesh(points, prepared_cells)

        data_item_coords = DataItem(
            points_content,
            name="coords",
            dimensions=list(points.shape),
            number_type="Float",
            data_format=writer.data_format,
            precision=8,
        )
        data_item_connectivity = DataItem(
            cells_content,
            name="connectivity",
            dimensions=[len(prepared_cells)],
            number_type="UInt",
            data_format=writer.data_format,
            precision=8,
        )

        geometry = Geometry(DataItem.new_reference(data_item_coords), "XYZ")
        topology = Topology(
            DataItem.new_reference(data_item_connectivity), num_cells, "Mixed"
        )

        xdmf = Xdmf(
            Domain(
                grids=[Grid.uniform("mesh", geometry, topology)],
                data_items=[data_item_coords, data_item_connectivity],
            ),
            information=[
                Information("data_storage", writer.data_storage.value),
                Information("version", __version__),
            ],
            xinclude=writer.uses_xinclude,
        )

        data_writer = TimeSeriesDataWriter(
            self.filename, writer, xdmf, len(points), num_cells
        )
        data_writer.write()
        return data_writer


def _to_time_token(t) -> str:
    if isinstance(t, str):
        return t
    if isinstance(t, numbers.Real) and not isinstance(t, bool):
        return str(t)
    raise InputError(f"Time must be a valid float, and not '{t}'")


def _prepare_data(data) -> dict:
    # sorted by name, that's the order in which they appear in the file
    if data is None:
        return {}
    return {
        name: (to_data_attribute(attribute), Values(values))
        for name, (attribute, values) in sorted(data.items())
    }


class TimeSeriesDataWriter:
    """Writes the data of the time steps, created by `TimeSeriesWriter.write_mesh`."""

    def __init__(
        self,
        filename,
        writer: DataWriter,
        xdmf: Xdmf,
        num_points: int,
        num_cells: int,
    ) -> None:
        self.filename = pathlib.Path(filename)
        self.xdmf = xdmf
        self.num_points = num_points
        self.num_cells = num_cells

        self._writer = writer
        self._mesh_grid = xdmf.domain.grids[0]
        self._collection = Grid.collection("time_series", "Temporal")
        self._written_times = set()

    def __enter__(self):
        return self

    def __exit__(self, *_):
        self.close()

    def close(self) -> None:
        self._writer.close()

    @property
    def times(self) -> list[str]:
        return [grid.time.value for grid in self._collection.grids]

    def write_data(self, t, point_data=None, cell_data=None) -> None:
        """Write point and cell data of one time step.

        `t` is the time, either as a string, which is written as is, or as a number.
        `point_data` and `cell_data` map names to (DataAttribute, values); the number
        of values has to match the number of points/cells times the size of the
        attribute. Every time can be written only once.
        """
        time = _to_time_token(t)
        # the time is checked before the data is converted
        validate_time(time, self._written_times)
        point_data = _prepare_data(point_data)
        cell_data = _prepare_data(cell_data)

        validate_data(
            time,
            self._written_times,
            point_data,
            cell_data,
            self.num_points,
            self.num_cells,
        )

        self._writer.write_data_initialize(time)
        try:
            attributes = self._create_attributes(point_data, "Node")
            attributes += self._create_attributes(cell_data, "Cell")
        finally:
            self._writer.write_data_finalize()

        # <Grid Name="time_series-t0.1" GridType="Uniform">
        #   <Geometry>, <Topology>  (references to the mesh)
        #   <Time Value="0.1"/>
        #   <Attribute Name="T" AttributeType="Scalar" Center="Node">
        #     <DataItem Dimensions="17" ...>
        #   </Attribute>
        # </Grid>
        grid = self._mesh_grid.copy()
        grid.name = f"time_series-t{time}"
        grid.time = Time(time)
        grid.attributes = attributes

        if not self._collection.grids:
            # from now on, the collection replaces the bare mesh grid
            self.xdmf.domain.grids = [self._collection]
        self._collection.grids.append(grid)
        self._written_times.add(time)

        self.write()

    def _create_attributes(self, data: dict, center: str) -> list[Attribute]:
        attributes = []
        for name, (attribute, values) in data.items():
            data_item = DataItem(
                self._writer.write_data(name, center, values.shaped(attribute)),
                dimensions=values.dimensions(attribute),
                number_type=values.number_type,
                data_format=self._writer.data_format,
                precision=values.precision,
            )
            attributes.append(
                Attribute(name, [data_item], attribute.attribute_type, center)
            )
        return attributes

    def write(self) -> None:
        # heavy data first, the XDMF file must never point to data that isn't there
        self._writer.flush()
        self.xdmf.write(self.filename)
