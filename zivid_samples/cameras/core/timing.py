"""Per-stage timing records for capture benchmarks.

Durations are float seconds taken from ``time.perf_counter``. Records add component-wise and divide by a scalar, so
averaging a run is ``sum(records) / len(records)``; ``average_times`` does exactly that with no rounding.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, fields
from typing import Sequence, TypeVar

T = TypeVar("T", bound="_TimingRecord")


class _TimingRecord:
    """Component-wise arithmetic shared by the timing dataclasses."""

    def __add__(self: T, other: T) -> T:
        if not isinstance(other, type(self)):
            return NotImplemented
        return type(self)(**{f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)})

    def __radd__(self: T, other) -> T:
        # Lets sum() start from its integer 0
        if other == 0:
            return self
        return self.__add__(other)

    def __truediv__(self: T, divisor: float) -> T:
        return type(self)(**{f.name: getattr(self, f.name) / divisor for f in fields(self)})


@dataclass
class MeasuredTimes(_TimingRecord):
    """Stage durations of one 3D capture.

    Attributes:
        capture: Blocking capture call
        point_cloud: Getting the point cloud handle from the frame
        process: Waiting for on-device processing to complete
        copy: Copying point data to host memory
        total: From before capture to after copy
    """

    capture: float = 0.0
    point_cloud: float = 0.0
    process: float = 0.0
    copy: float = 0.0
    total: float = 0.0


@dataclass
class Measured2DTimes(_TimingRecord):
    """Stage durations of one 2D capture."""

    capture: float = 0.0
    image_rgba: float = 0.0
    total: float = 0.0


@dataclass
class ConversionTimes(_TimingRecord):
    """Stage durations of converting one point cloud into a 3D object model.

    ``finalize`` covers everything after the copy, i.e. tuples through colors.
    """

    copy: float = 0.0
    tuples: float = 0.0
    construct: float = 0.0
    mapping: float = 0.0
    normals: float = 0.0
    colors: float = 0.0
    finalize: float = 0.0


def average_times(records: Sequence[T]) -> T:
    """Component-wise arithmetic mean of timing records.

    Raises:
        ValueError: If ``records`` is empty
    """
    if not records:
        raise ValueError("Cannot average an empty sequence of timing records")
    return sum(records) / len(records)


def format_duration(seconds: float) -> str:
    """Format a duration as milliseconds with three decimals, e.g. ``12.346 ms``."""
    return f"{seconds * 1000.0:.3f} ms"


class Stopwatch:
    """Lap timer over ``time.perf_counter``.

    Usage:
        >>> watch = Stopwatch()
        >>> frame = camera.capture(settings)
        >>> capture_time = watch.lap()
        >>> total_time = watch.elapsed()
    """

    def __init__(self):
        self._start = time.perf_counter()
        self._last = self._start

    def lap(self) -> float:
        """Seconds since the previous lap (or since start)."""
        now = time.perf_counter()
        duration = now - self._last
        self._last = now
        return duration

    def elapsed(self) -> float:
        """Seconds since start, up to the last lap."""
        return self._last - self._start
