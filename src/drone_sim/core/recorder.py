"""Accumulation of the flown path."""

from __future__ import annotations

from typing import List, Optional

import numpy as np

from .geometry import Point3


class PathRecorder:
    """Ordered list of distinct sampled positions for one run."""

    def __init__(self, tolerance_m: float = 1e-5) -> None:
        self._tolerance = tolerance_m
        self._points: List[Point3] = []

    def __len__(self) -> int:
        return len(self._points)

    @property
    def points(self) -> List[Point3]:
        return list(self._points)

    @property
    def last(self) -> Optional[Point3]:
        return self._points[-1] if self._points else None

    def clear(self) -> None:
        self._points = []

    def record(self, position: Point3) -> bool:
        """Append ``position`` unless it repeats the last point; returns True if appended."""
        if self._points and self._points[-1].is_close(position, self._tolerance):
            return False
        self._points.append(position)
        return True

    def as_array(self) -> np.ndarray:
        if not self._points:
            return np.zeros((0, 3), dtype=np.float64)
        return np.array([p.as_tuple() for p in self._points], dtype=np.float64)

    def length_m(self) -> float:
        """Polyline length of the recorded path."""
        if len(self._points) < 2:
            return 0.0
        steps = np.diff(self.as_array(), axis=0)
        return float(np.linalg.norm(steps, axis=1).sum())
