"""Live clearance between the drone and the obstacle edges."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..config import EnginePolicy, ObstacleSet
from .geometry import Point3, point_to_segment_distance

logger = logging.getLogger(__name__)

Segment = Tuple[Point3, Point3]


def obstacle_segments(obstacles: ObstacleSet) -> List[Segment]:
    """Convert every edge with two existing nodes into a segment in meters."""
    return [
        (Point3.from_cm(obstacles.nodes[edge.start]), Point3.from_cm(obstacles.nodes[edge.end]))
        for edge in obstacles.valid_edges()
    ]


def minimum_distance(position: Point3, segments: Sequence[Segment]) -> float:
    """Smallest distance from ``position`` to any segment, ``inf`` if there are none."""
    best = math.inf
    for a, b in segments:
        dist = point_to_segment_distance(position, a, b)
        if dist < best:
            best = dist
    return best


def evaluate(
    position: Point3,
    segments: Sequence[Segment],
    threshold_m: Optional[float] = None,
) -> Tuple[float, bool]:
    """Return this sample's clearance and whether it is a collision."""
    if threshold_m is None:
        threshold_m = EnginePolicy().collision_threshold_m
    dist = minimum_distance(position, segments)
    return dist, dist <= threshold_m


@dataclass
class ClearanceState:
    running_minimum: Optional[float] = None
    collided: bool = False

    @property
    def available(self) -> bool:
        return self.running_minimum is not None


class ClearanceEvaluator:
    """Accumulates the running minimum clearance and the collision flag for a run."""

    def __init__(self, obstacles: ObstacleSet, policy: Optional[EnginePolicy] = None) -> None:
        self._policy = policy or EnginePolicy()
        self._segments = obstacle_segments(obstacles)
        self._state = ClearanceState()

    @property
    def state(self) -> ClearanceState:
        return self._state

    @property
    def segments(self) -> List[Segment]:
        return list(self._segments)

    def reset(self) -> None:
        self._state = ClearanceState()

    def observe(self, position: Point3) -> float:
        """Fold one sampled position into the state and return its clearance."""
        dist, hit = evaluate(position, self._segments, self._policy.collision_threshold_m)
        if math.isinf(dist):
            return dist
        state = self._state
        if state.running_minimum is None or dist < state.running_minimum:
            state.running_minimum = dist
        if hit and not state.collided:
            state.collided = True
            logger.info(
                "Collision: clearance %.3f m at (%.3f, %.3f, %.3f)",
                dist,
                position.x,
                position.y,
                position.z,
            )
        return dist
