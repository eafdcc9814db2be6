"""Geometry primitives for the flight engine.

All engine-side coordinates are meters. Obstacle nodes and flight
parameters are entered in centimeters and converted with `Point3.from_cm`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Tuple

import numpy as np

CM_PER_M = 100.0


@dataclass(frozen=True)
class Point3:
    """Immutable (x, y, z) position in meters."""

    x: float
    y: float
    z: float

    @classmethod
    def from_cm(cls, values: Iterable[float]) -> "Point3":
        x, y, z = (float(v) / CM_PER_M for v in values)
        return cls(x, y, z)

    @classmethod
    def from_array(cls, values: np.ndarray) -> "Point3":
        return cls(float(values[0]), float(values[1]), float(values[2]))

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def __add__(self, other: "Point3") -> "Point3":
        return Point3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Point3") -> "Point3":
        return Point3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, factor: float) -> "Point3":
        return Point3(self.x * factor, self.y * factor, self.z * factor)

    __rmul__ = __mul__

    def dot(self, other: "Point3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def norm(self) -> float:
        return math.sqrt(self.dot(self))

    def distance_to(self, other: "Point3") -> float:
        return (self - other).norm()

    def with_z_offset(self, dz: float) -> "Point3":
        return Point3(self.x, self.y, self.z + dz)

    def is_close(self, other: "Point3", tolerance: float) -> bool:
        """True when every axis differs by at most ``tolerance``."""
        return (
            abs(self.x - other.x) <= tolerance
            and abs(self.y - other.y) <= tolerance
            and abs(self.z - other.z) <= tolerance
        )


ORIGIN = Point3(0.0, 0.0, 0.0)


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def closest_point_on_segment(p: np.ndarray, a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    Return the closest point on segment AB to P.

    A zero-length segment collapses to A.
    """
    ab = b - a
    denom = float(np.dot(ab, ab))
    if denom == 0.0:
        return a.copy()
    t = float(np.dot(p - a, ab)) / denom
    t = 0.0 if t < 0.0 else (1.0 if t > 1.0 else t)
    return a + t * ab


def point_to_segment_distance(p: Point3, a: Point3, b: Point3) -> float:
    """
    Euclidean distance from P to the segment AB.

    The endpoints are put in lexicographic order before projecting, so the
    result is bit-for-bit identical whichever way round the edge is stored.
    """
    if b.as_tuple() < a.as_tuple():
        a, b = b, a
    p_arr = p.as_array()
    closest = closest_point_on_segment(p_arr, a.as_array(), b.as_array())
    return float(np.linalg.norm(p_arr - closest))
