"""Compaction of row-major point cloud grids into per-point buffers.

The camera delivers dense ``H x W`` grids in which cells without a reconstructed surface hold NaN. 3D object models
want flat, gap-free buffers instead, plus a mapping back to the grid so that 2D image operations can still be related
to the points. ``compact_point_cloud`` produces both.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from zivid_samples.cameras.core.models import PointCloudArrays


def _empty(dtype) -> np.ndarray:
    return np.empty(0, dtype=dtype)


@dataclass
class CompactedPointCloud:
    """Valid points of a grid, in row-major scan order.

    Attributes:
        width: Width of the source grid
        height: Height of the source grid
        points_x, points_y, points_z: Coordinates (k,) float32
        normals_x, normals_y, normals_z: Normals (k,) float32, zero where the source normal was NaN
        colors_r, colors_g, colors_b: Color channels (k,) int64, None if the grid had no colors
        xyz_mapping: ``[width, height, row_0 .. row_{k-1}, col_0 .. col_{k-1}]`` (2k + 2,) int64
    """

    width: int
    height: int
    points_x: np.ndarray = field(default_factory=lambda: _empty(np.float32))
    points_y: np.ndarray = field(default_factory=lambda: _empty(np.float32))
    points_z: np.ndarray = field(default_factory=lambda: _empty(np.float32))
    normals_x: np.ndarray = field(default_factory=lambda: _empty(np.float32))
    normals_y: np.ndarray = field(default_factory=lambda: _empty(np.float32))
    normals_z: np.ndarray = field(default_factory=lambda: _empty(np.float32))
    colors_r: Optional[np.ndarray] = None
    colors_g: Optional[np.ndarray] = None
    colors_b: Optional[np.ndarray] = None
    xyz_mapping: Optional[np.ndarray] = None

    def __post_init__(self):
        if self.xyz_mapping is None:
            self.xyz_mapping = np.array([self.width, self.height], dtype=np.int64)

    @property
    def num_points(self) -> int:
        return int(self.points_x.shape[0])

    @property
    def has_colors(self) -> bool:
        return self.colors_r is not None

    @property
    def rows(self) -> np.ndarray:
        """Source grid row of every point."""
        return self.xyz_mapping[2 : 2 + self.num_points]

    @property
    def cols(self) -> np.ndarray:
        """Source grid column of every point."""
        return self.xyz_mapping[2 + self.num_points :]

    def __repr__(self) -> str:
        return f"CompactedPointCloud({self.width}x{self.height}, points={self.num_points})"


def compact_point_cloud(cloud: PointCloudArrays) -> CompactedPointCloud:
    """Keep the valid cells of a point cloud grid.

    A cell is valid when its x coordinate is not NaN. For the i-th valid cell at ``(row, col)`` the i-th entry of
    every per-point buffer comes from that cell, and ``xyz_mapping[2 + i] == row``, ``xyz_mapping[2 + k + i] == col``.
    Normals are copied only where the source normal's x is not NaN; the remaining slots stay zero.

    Args:
        cloud: Grids copied out of the camera

    Returns:
        The compacted buffers. A grid without valid cells yields empty buffers and a mapping of length 2.
    """
    rows, cols = np.nonzero(cloud.valid_mask)
    k = rows.shape[0]

    points = cloud.xyz[rows, cols].astype(np.float32, copy=False)

    normals = np.zeros((k, 3), dtype=np.float32)
    if cloud.normals is not None:
        source_normals = cloud.normals[rows, cols]
        has_normal = ~np.isnan(source_normals[:, 0])
        normals[has_normal] = source_normals[has_normal]

    colors = None
    if cloud.rgba is not None:
        colors = cloud.rgba[rows, cols, :3].astype(np.int64)

    xyz_mapping = np.empty(2 * k + 2, dtype=np.int64)
    xyz_mapping[0] = cloud.width
    xyz_mapping[1] = cloud.height
    xyz_mapping[2 : 2 + k] = rows
    xyz_mapping[2 + k :] = cols

    return CompactedPointCloud(
        width=cloud.width,
        height=cloud.height,
        points_x=np.ascontiguousarray(points[:, 0]),
        points_y=np.ascontiguousarray(points[:, 1]),
        points_z=np.ascontiguousarray(points[:, 2]),
        normals_x=np.ascontiguousarray(normals[:, 0]),
        normals_y=np.ascontiguousarray(normals[:, 1]),
        normals_z=np.ascontiguousarray(normals[:, 2]),
        colors_r=np.ascontiguousarray(colors[:, 0]) if colors is not None else None,
        colors_g=np.ascontiguousarray(colors[:, 1]) if colors is not None else None,
        colors_b=np.ascontiguousarray(colors[:, 2]) if colors is not None else None,
        xyz_mapping=xyz_mapping,
    )
