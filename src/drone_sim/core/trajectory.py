"""Trajectory generation utilities.

This module maps a normalized time parameter ``t`` in [0, 1] to a 3D drone
position for the supported flight profiles: a straight line and an
elliptical arc whose major axis is the start-to-end chord.

Generators are looked up by name through a small registry, so additional
flight profiles can be registered by plugins via
`register_trajectory_generator` or the ``drone_sim.trajectories`` entry
point group.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Protocol, Union

import numpy as np

from ..config import ArcDirection, FlightMode, FlightParameters
from .coordinates import resolve_end
from .geometry import CM_PER_M, Point3, lerp

logger = logging.getLogger(__name__)

# Horizontal components below this make the chord count as vertical.
VERTICAL_AXIS_TOLERANCE = 1e-6


@dataclass(frozen=True)
class FlightPlan:
    """Resolved flight geometry for one run, in meters."""

    mode: Union[FlightMode, str]
    start: Point3
    end: Point3
    arc_direction: ArcDirection = ArcDirection.CLOCKWISE
    z_offset_m: float = 0.0
    speed_percent: float = 100.0

    @property
    def distance_m(self) -> float:
        return self.start.distance_to(self.end)

    @property
    def mode_name(self) -> str:
        """Generator name for this plan; plugin profiles use plain strings."""
        return self.mode.value if isinstance(self.mode, FlightMode) else str(self.mode)


def build_flight_plan(params: FlightParameters) -> FlightPlan:
    """Resolve the end point and convert the parameter snapshot to meters."""
    start_cm = Point3(*params.start)
    end_cm = resolve_end(start_cm, Point3(*params.end), params.end_coord_mode, params.heading_deg)
    return FlightPlan(
        mode=params.mode,
        start=Point3.from_cm(start_cm.as_tuple()),
        end=Point3.from_cm(end_cm.as_tuple()),
        arc_direction=params.arc_direction,
        z_offset_m=params.z_offset_cm / CM_PER_M,
        speed_percent=params.speed_percent,
    )


# ---------------------------------------------------------------------------
# Trajectory Plugin Registry
# ---------------------------------------------------------------------------

class TrajectoryGenerator(Protocol):
    """Protocol for trajectory generator functions.

    Generators receive the normalized time and the resolved flight plan and
    return the drone position in meters. They must return ``plan.start``
    (plus the z offset) at ``t = 0`` and ``plan.end`` (plus the z offset)
    at ``t = 1``.
    """

    def __call__(self, t: float, plan: FlightPlan) -> Point3:
        ...


_trajectory_registry: Dict[str, TrajectoryGenerator] = {}


def register_trajectory_generator(
    name: str,
    generator: TrajectoryGenerator,
    *,
    override: bool = False,
) -> None:
    """
    Register a trajectory generator under ``name``.

    Raises
    ------
    ValueError
        If a generator with the same name already exists and override is False.
    """
    if name in _trajectory_registry and not override:
        raise ValueError(
            f"Trajectory generator '{name}' already registered. "
            "Use override=True to replace it."
        )
    _trajectory_registry[name] = generator
    logger.debug("Registered trajectory generator: %s", name)


def unregister_trajectory_generator(name: str) -> bool:
    """Remove a registered generator; returns False if it was not registered."""
    if name in _trajectory_registry:
        del _trajectory_registry[name]
        logger.debug("Unregistered trajectory generator: %s", name)
        return True
    return False


def get_registered_trajectory_types() -> List[str]:
    return list(_trajectory_registry.keys())


def discover_trajectory_plugins() -> None:
    """
    Discover and load trajectory plugins via entry points.

    Plugins register themselves in their pyproject.toml:
        [project.entry-points."drone_sim.trajectories"]
        plugin_name = "package.module:register_function"
    """
    from importlib.metadata import entry_points

    for ep in entry_points(group="drone_sim.trajectories"):
        try:
            register_func: Callable[[], None] = ep.load()
            register_func()
            logger.debug("Loaded trajectory plugin: %s", ep.name)
        except Exception as e:  # noqa: BLE001
            logger.warning("Failed to load trajectory plugin '%s': %s", ep.name, e)


# ---------------------------------------------------------------------------
# Built-in Trajectory Generators
# ---------------------------------------------------------------------------


def _check_t(t: float) -> None:
    if not 0.0 <= t <= 1.0:
        raise ValueError(f"Normalized time must lie in [0, 1], got {t}")


def line_position(t: float, plan: FlightPlan) -> Point3:
    _check_t(t)
    start, end = plan.start, plan.end
    if t == 1.0:
        return end.with_z_offset(plan.z_offset_m)
    return Point3(
        lerp(start.x, end.x, t),
        lerp(start.y, end.y, t),
        lerp(start.z, end.z, t) + plan.z_offset_m,
    )


def arc_minor_axis(major: np.ndarray) -> np.ndarray:
    """
    Unit vector perpendicular to the chord direction ``major``.

    For a vertical chord the horizontal X axis is used; otherwise the
    horizontal perpendicular obtained by crossing the vertical axis with
    the chord, which keeps the clockwise arc on the right-hand turn side
    when viewed from above.
    """
    if abs(major[0]) < VERTICAL_AXIS_TOLERANCE and abs(major[1]) < VERTICAL_AXIS_TOLERANCE:
        return np.array([1.0, 0.0, 0.0], dtype=np.float64)
    perp = np.array([-major[1], major[0], 0.0], dtype=np.float64)
    return perp / np.linalg.norm(perp)


def arc_position(t: float, plan: FlightPlan) -> Point3:
    """
    Point on the half ellipse from ``plan.start`` to ``plan.end``.

    The chord is the major axis; the minor semi-axis is a quarter of the
    chord length, on the side chosen by ``plan.arc_direction``. The angle
    runs from pi at the start to 0 at the end.
    """
    _check_t(t)
    a_pt = plan.start.as_array()
    b_pt = plan.end.as_array()
    chord = b_pt - a_pt
    length = float(np.linalg.norm(chord))
    if length == 0.0:
        return plan.start
    if t == 0.0:
        return plan.start.with_z_offset(plan.z_offset_m)
    if t == 1.0:
        return plan.end.with_z_offset(plan.z_offset_m)

    major = chord / length
    minor = arc_minor_axis(major)
    sign = 1.0 if ArcDirection(plan.arc_direction) is ArcDirection.CLOCKWISE else -1.0
    semi_major = length / 2.0
    semi_minor = (length / 4.0) * sign

    theta = math.pi * (1.0 - t)
    center = (a_pt + b_pt) / 2.0
    point = center + semi_major * math.cos(theta) * major + semi_minor * math.sin(theta) * minor
    return Point3.from_array(point).with_z_offset(plan.z_offset_m)


_builtin_generators: Dict[str, TrajectoryGenerator] = {
    FlightMode.LINE.value: line_position,
    FlightMode.ARC.value: arc_position,
}


def get_trajectory_generator(name: str) -> TrajectoryGenerator:
    # Registered generators may override the built-ins.
    if name in _trajectory_registry:
        return _trajectory_registry[name]
    if name not in _builtin_generators:
        available = list(_builtin_generators.keys()) + list(_trajectory_registry.keys())
        raise ValueError(
            f"Unsupported trajectory type: '{name}'. "
            f"Available types: {available}"
        )
    return _builtin_generators[name]


def plan_position(t: float, plan: FlightPlan) -> Point3:
    return get_trajectory_generator(plan.mode_name)(t, plan)


def position(
    t: float,
    start: Point3,
    end: Point3,
    mode: FlightMode,
    arc_direction: ArcDirection = ArcDirection.CLOCKWISE,
    z_offset: float = 0.0,
) -> Point3:
    """Position at normalized time ``t`` for the given endpoints (meters)."""
    plan = FlightPlan(
        mode=FlightMode(mode),
        start=start,
        end=end,
        arc_direction=ArcDirection(arc_direction),
        z_offset_m=z_offset,
    )
    return plan_position(t, plan)


def sample_trajectory(plan: FlightPlan, samples: int = 200) -> np.ndarray:
    """Return an ``(samples, 3)`` array of evenly spaced positions along the plan."""
    if samples < 2:
        raise ValueError("At least two samples are required")
    t_values = np.linspace(0.0, 1.0, num=samples, endpoint=True)
    return np.array([plan_position(float(t), plan).as_tuple() for t in t_values], dtype=np.float64)
