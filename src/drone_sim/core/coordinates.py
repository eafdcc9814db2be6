"""Resolution of the flight end point into the global frame."""

from __future__ import annotations

import math

from ..config import EndCoordMode
from .geometry import Point3


def rotate_heading(offset: Point3, heading_deg: float) -> Point3:
    """
    Rotate a horizontal offset by a heading measured clockwise from +Y.

    The z component is passed through untouched.
    """
    theta = math.radians(heading_deg)
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    return Point3(
        offset.x * cos_t + offset.y * sin_t,
        -offset.x * sin_t + offset.y * cos_t,
        offset.z,
    )


def resolve_end(
    start: Point3,
    end_input: Point3,
    mode: EndCoordMode,
    heading_deg: float = 0.0,
) -> Point3:
    """
    Return the global end point of a flight.

    In global mode ``end_input`` already is the end point. In local mode it
    is an offset from ``start`` expressed in the drone frame given by
    ``heading_deg``.
    """
    if EndCoordMode(mode) is EndCoordMode.GLOBAL:
        return end_input
    return start + rotate_heading(end_input, heading_deg)
