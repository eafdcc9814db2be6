"""Scenario scaffolding utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml

from .config import ArcDirection, BoundsConfig, EnginePolicy, FlightMode


DEFAULT_START_CM = [50.0, 50.0, 100.0]
DEFAULT_END_CM = [350.0, 450.0, 100.0]
DEFAULT_OBSTACLE_NODES_CM = [[200.0, 150.0, 0.0], [200.0, 150.0, 250.0], [100.0, 300.0, 250.0]]


def build_stub(scenario_name: str, mode: FlightMode = FlightMode.ARC) -> Dict[str, Any]:
    """Return the raw dictionary of a stub scenario."""
    return {
        "metadata": {"scenario": scenario_name},
        "flight": {
            "mode": FlightMode(mode).value,
            "start": list(DEFAULT_START_CM),
            "end": list(DEFAULT_END_CM),
            "end_coord_mode": "global",
            "heading_deg": 0.0,
            "speed_percent": 100.0,
            "arc_direction": ArcDirection.CLOCKWISE.value,
            "z_offset_cm": 0.0,
        },
        "obstacles": {
            "nodes": [list(node) for node in DEFAULT_OBSTACLE_NODES_CM],
            "edges": [[0, 1], [1, 2]],
        },
        "policy": EnginePolicy().model_dump(),
        "bounds": BoundsConfig().model_dump(),
    }


def write_stub(
    target_path: Path,
    scenario_name: str,
    mode: FlightMode = FlightMode.ARC,
) -> None:
    target_path = Path(target_path).resolve()
    target_path.parent.mkdir(parents=True, exist_ok=True)

    stub = build_stub(scenario_name, mode)
    target_path.write_text(yaml.safe_dump(stub, sort_keys=False), encoding="utf-8")
