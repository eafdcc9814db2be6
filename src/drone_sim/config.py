"""
Configuration models and loader for flight scenarios.

A scenario YAML file describes one flight, the obstacle polyline set, and
the engine policy values. All user-facing coordinates are centimeters.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, confloat, field_validator, model_validator


PositiveFloat = confloat(gt=0)
NonNegativeFloat = confloat(ge=0)
Vector3 = Tuple[float, float, float]


class FlightMode(str, Enum):
    ARC = "arc"
    LINE = "line"


class ArcDirection(str, Enum):
    CLOCKWISE = "clockwise"
    ANTICLOCKWISE = "anticlockwise"


class EndCoordMode(str, Enum):
    GLOBAL = "global"
    LOCAL = "local"


class FlightParameters(BaseModel):
    """
    Immutable snapshot of the flight inputs for one simulation run.

    ``end`` is either a global point or, in local mode, an offset from
    ``start`` rotated by ``heading_deg`` (clockwise from +Y).
    """

    model_config = ConfigDict(frozen=True)

    mode: FlightMode = Field(default=FlightMode.ARC, description="Flight profile")
    start: Vector3 = Field(default=(0.0, 0.0, 0.0), description="Start point (cm, global)")
    end: Vector3 = Field(default=(0.0, 0.0, 0.0), description="End point or local offset (cm)")
    end_coord_mode: EndCoordMode = Field(
        default=EndCoordMode.GLOBAL, description="How to interpret the end coordinate"
    )
    heading_deg: float = Field(
        default=0.0, description="Heading for local end offsets (degrees, clockwise from +Y)"
    )
    speed_percent: float = Field(default=100.0, description="Flight speed; 100 % equals 1 m/s")
    arc_direction: ArcDirection = Field(
        default=ArcDirection.CLOCKWISE, description="Side of the chord the arc bulges toward"
    )
    z_offset_cm: float = Field(default=0.0, description="Offset added to every sampled z (cm)")

    @field_validator("mode", mode="before")
    @classmethod
    def _accept_flyto(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().lower() in ("flyto", "fly_to", "fly-to"):
            return FlightMode.LINE
        return value


class ObstacleEdge(BaseModel):
    """Straight obstacle segment between two node indices."""

    model_config = ConfigDict(frozen=True)

    start: int
    end: int

    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            if len(value) != 2:
                raise ValueError(f"Obstacle edge needs exactly two node indices, got {value!r}")
            return {"start": value[0], "end": value[1]}
        return value


class ObstacleSet(BaseModel):
    """
    Obstacle nodes (cm) and the edges joining them.

    Edges are not checked against the node list: the data is edited
    interactively and may reference missing nodes for a while. Such edges
    are ignored during clearance evaluation.
    """

    model_config = ConfigDict(frozen=True)

    nodes: List[Vector3] = Field(default_factory=list)
    edges: List[ObstacleEdge] = Field(default_factory=list)

    def has_node(self, index: int) -> bool:
        return 0 <= index < len(self.nodes)

    def valid_edges(self) -> List[ObstacleEdge]:
        return [edge for edge in self.edges if self.has_node(edge.start) and self.has_node(edge.end)]

    def dangling_edges(self) -> List[int]:
        """Return the positions of edges that reference a missing node."""
        return [
            idx
            for idx, edge in enumerate(self.edges)
            if not (self.has_node(edge.start) and self.has_node(edge.end))
        ]


class EnginePolicy(BaseModel):
    """Policy constants of the simulation engine."""

    model_config = ConfigDict(frozen=True)

    collision_threshold_m: NonNegativeFloat = Field(
        default=0.1, description="Clearance at or below which the flight counts as a collision"
    )
    path_dedup_tolerance_m: NonNegativeFloat = Field(
        default=1e-5, description="Per-axis tolerance under which consecutive path samples coalesce"
    )
    min_run_duration_s: PositiveFloat = Field(
        default=1.0, description="Shortest allowed flight duration"
    )
    min_speed_mps: PositiveFloat = Field(
        default=0.1, description="Floor applied to the configured speed"
    )
    completion_delay_s: NonNegativeFloat = Field(
        default=0.5, description="Delay between the terminal sample and the run summary"
    )


class BoundsConfig(BaseModel):
    """Ground rectangle of the flight area, anchored at the origin (meters)."""

    model_config = ConfigDict(frozen=True)

    width_m: PositiveFloat = Field(default=4.0, description="Extent along +X")
    height_m: PositiveFloat = Field(default=5.0, description="Extent along +Y")

    def contains(self, x: float, y: float) -> bool:
        return 0.0 <= x <= self.width_m and 0.0 <= y <= self.height_m


class RunConfig(BaseModel):
    """Parameters of headless simulation runs."""

    frame_rate_hz: Optional[PositiveFloat] = Field(
        default=None, description="Tick rate for headless runs (defaults to the settings value)"
    )


class ScenarioConfig(BaseModel):
    """Top-level configuration object for a flight scenario."""

    flight: FlightParameters
    obstacles: ObstacleSet = Field(default_factory=ObstacleSet)
    policy: EnginePolicy = Field(default_factory=EnginePolicy)
    bounds: BoundsConfig = Field(default_factory=BoundsConfig)
    simulation: RunConfig = Field(default_factory=RunConfig)
    metadata: Dict[str, Any] = Field(
        default_factory=dict, description="Optional metadata for bookkeeping"
    )


def load_scenario_config(path: Union[str, Path]) -> ScenarioConfig:
    """
    Load and validate a flight scenario from a YAML file.

    Parameters
    ----------
    path:
        Path to the YAML scenario file.

    Returns
    -------
    ScenarioConfig
        Parsed and validated configuration object.
    """

    config_path = Path(path).resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as handle:
        raw_data = yaml.safe_load(handle) or {}

    return ScenarioConfig.model_validate(raw_data)
