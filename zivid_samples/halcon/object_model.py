"""HALCON 3D object models built from compacted point clouds.

Requires the ``halcon`` Python package (MVTec HALCON) and a valid HALCON license.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Optional, Union

from zivid_samples.cameras.core.timing import ConversionTimes, Stopwatch, format_duration
from zivid_samples.core import Component
from zivid_samples.core.exceptions import ObjectModelError, SDKNotAvailableError
from zivid_samples.halcon.conversion import CompactedPointCloud

try:
    import halcon as ha

    HALCON_AVAILABLE = True
except ImportError:
    HALCON_AVAILABLE = False
    ha = None

NORMAL_ATTRIBUTES = ["point_normal_x", "point_normal_y", "point_normal_z"]


class HalconObjectModel(Component):
    """A HALCON 3D object model with normals, colors and the grid mapping attached.

    Every HALCON error raised while checking the license, building or writing the model is re-raised as
    ``ObjectModelError`` carrying HALCON's message.

    Usage:
        >>> model = HalconObjectModel()
        >>> model.check_license()
        >>> model.from_point_cloud(compact_point_cloud(cloud))
        >>> model.save("Zivid3D.ply")
    """

    def __init__(self, **kwargs):
        if not HALCON_AVAILABLE:
            raise SDKNotAvailableError(
                "halcon",
                "Install MVTec HALCON to build 3D object models:\n"
                "1. Install HALCON and a valid license\n"
                "2. pip install mvtec-halcon",
            )
        super().__init__(**kwargs)
        self._model: Optional[Any] = None
        self._num_points = 0
        self.times: Optional[ConversionTimes] = None

    def check_license(self) -> float:
        """Query HALCON's license state.

        Returns:
            Seconds the query took

        Raises:
            ObjectModelError: If HALCON reports an error, e.g. no valid license
        """
        start = time.perf_counter()
        try:
            ha.get_system("is_license_valid")
        except ha.HError as e:
            raise ObjectModelError(str(e)) from e
        elapsed = time.perf_counter() - start
        self.logger.info(f"{format_duration(elapsed)} - Halcon license check")
        return elapsed

    def from_point_cloud(
        self, compacted: CompactedPointCloud, copy_time: float = 0.0, compact_time: float = 0.0
    ) -> ConversionTimes:
        """Build the object model from compacted point buffers.

        Points construct the model; ``xyz_mapping`` is attached to the object, normals and colors to the points.

        Args:
            compacted: Valid points of a capture
            copy_time: Seconds spent copying the grids out of the camera, recorded in the returned times
            compact_time: Seconds spent compacting the grids, counted as part of tuple preparation

        Returns:
            Durations of each conversion stage
        """
        watch = Stopwatch()
        try:
            tuple_x, tuple_y, tuple_z = (
                compacted.points_x.tolist(),
                compacted.points_y.tolist(),
                compacted.points_z.tolist(),
            )
            tuple_normals = compacted.normals_x.tolist() + compacted.normals_y.tolist() + compacted.normals_z.tolist()
            tuple_colors = None
            if compacted.has_colors:
                tuple_colors = (
                    compacted.colors_r.tolist(),
                    compacted.colors_g.tolist(),
                    compacted.colors_b.tolist(),
                )
            tuple_mapping = compacted.xyz_mapping.tolist()
            tuples_time = watch.lap()

            model = ha.gen_object_model_3d_from_points(tuple_x, tuple_y, tuple_z)
            construct_time = watch.lap()

            ha.set_object_model_3d_attrib_mod(model, "xyz_mapping", "object", tuple_mapping)
            mapping_time = watch.lap()

            ha.set_object_model_3d_attrib_mod(model, NORMAL_ATTRIBUTES, "points", tuple_normals)
            normals_time = watch.lap()

            if tuple_colors is not None:
                for attribute, values in zip(("red", "green", "blue"), tuple_colors):
                    ha.set_object_model_3d_attrib_mod(model, attribute, "points", values)
            colors_time = watch.lap()
        except ha.HError as e:
            raise ObjectModelError(str(e)) from e

        self._model = model
        self._num_points = compacted.num_points
        self.times = ConversionTimes(
            copy=copy_time,
            tuples=compact_time + tuples_time,
            construct=construct_time,
            mapping=mapping_time,
            normals=normals_time,
            colors=colors_time,
            finalize=compact_time + watch.elapsed(),
        )
        self.logger.info(f"{format_duration(self.times.finalize)} - Finalize Halcon")
        return self.times

    @Component.autolog()
    def save(self, path: Union[str, Path], invert_normals: bool = False) -> Path:
        """Write the model as a PLY file.

        Raises:
            ObjectModelError: If no model has been built or HALCON fails to write
        """
        if self._model is None:
            raise ObjectModelError("No object model to save, call from_point_cloud() first")
        path = Path(path)
        try:
            ha.write_object_model_3d(
                self._model, "ply", str(path), "invert_normals", "true" if invert_normals else "false"
            )
        except ha.HError as e:
            raise ObjectModelError(str(e)) from e
        self.logger.debug(f"Saved object model with {self._num_points} points to {path}")
        return path

    @property
    def num_points(self) -> int:
        return self._num_points

    @property
    def handle(self) -> Optional[Any]:
        """The HALCON object model handle, None until built."""
        return self._model
