"""PLY export of compacted point clouds with plyfile.

Writes the same vertex layout as the HALCON writer, so the capture sample can run without a HALCON license.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

import numpy as np
from plyfile import PlyData, PlyElement

from zivid_samples.halcon.conversion import CompactedPointCloud


def write_ply(
    compacted: CompactedPointCloud, path: Union[str, Path], binary: bool = True, invert_normals: bool = False
) -> Path:
    """Save compacted points as a PLY file.

    Args:
        compacted: Valid points of a capture
        path: Output file path
        binary: If True, save in binary format; otherwise ASCII
        invert_normals: If True, write the negated normals

    Returns:
        The output path
    """
    dtype_list = [("x", "f4"), ("y", "f4"), ("z", "f4")]
    if compacted.has_colors:
        dtype_list.extend([("red", "u1"), ("green", "u1"), ("blue", "u1")])
    dtype_list.extend([("nx", "f4"), ("ny", "f4"), ("nz", "f4")])

    vertices = np.zeros(compacted.num_points, dtype=dtype_list)

    vertices["x"] = compacted.points_x
    vertices["y"] = compacted.points_y
    vertices["z"] = compacted.points_z

    if compacted.has_colors:
        vertices["red"] = compacted.colors_r
        vertices["green"] = compacted.colors_g
        vertices["blue"] = compacted.colors_b

    sign = -1.0 if invert_normals else 1.0
    vertices["nx"] = sign * compacted.normals_x
    vertices["ny"] = sign * compacted.normals_y
    vertices["nz"] = sign * compacted.normals_z

    path = Path(path)
    PlyData([PlyElement.describe(vertices, "vertex")], text=not binary).write(str(path))
    return path
