"""Conversion of camera point clouds into HALCON 3D object models and PLY files."""

from zivid_samples.halcon.conversion import CompactedPointCloud, compact_point_cloud
from zivid_samples.halcon.object_model import HALCON_AVAILABLE, HalconObjectModel
from zivid_samples.halcon.ply import write_ply

__all__ = [
    "CompactedPointCloud",
    "compact_point_cloud",
    "HalconObjectModel",
    "HALCON_AVAILABLE",
    "write_ply",
]
