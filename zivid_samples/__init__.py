"""
Zivid Samples

Capture samples for Zivid structured light 3D cameras: capturing point clouds into HALCON 3D object models, and
benchmarking parallel captures on several cameras.

Design Philosophy:
    This module uses lazy imports so that importing the package does not load the camera or HALCON SDKs unless they
    are actually needed. Each sample is only imported when accessed.

Usage:
    from zivid_samples import CaptureHalconViaZivid, MultiCameraCaptureInParallel

    summary = await CaptureHalconViaZivid(writer="ply").run()

    result = await MultiCameraCaptureInParallel(backend="MockZivid").run()
    for line in result.report():
        print(line)

Configuration:
    All components share ``SampleSettings``:
    - Environment variables, nested with ``__`` (e.g. ZIVID_SAMPLES_CAMERA__BACKEND=MockZivid)
    - A ``.env`` file
    - The packaged ``core/config.ini``
"""

__version__ = "0.1.0"


def __getattr__(name):
    """Lazy import implementation to avoid loading the vendor SDKs at once."""
    if name == "AsyncCamera":
        from .cameras.core.async_camera import AsyncCamera

        return AsyncCamera
    elif name == "CaptureHalconViaZivid":
        from .samples.capture_halcon import CaptureHalconViaZivid

        return CaptureHalconViaZivid
    elif name == "MultiCameraCaptureInParallel":
        from .samples.multi_camera import MultiCameraCaptureInParallel

        return MultiCameraCaptureInParallel
    else:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = ["AsyncCamera", "CaptureHalconViaZivid", "MultiCameraCaptureInParallel"]
