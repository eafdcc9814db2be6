"""Output exporters for flight simulation artefacts.

Provides helpers for writing the sampled flight path to CSV and the run
summary, together with the inputs that produced it, to JSON.
"""

from __future__ import annotations

import csv
import json
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

import numpy as np

from .config import ScenarioConfig
from .core.simulation import RunResult, RunSummary
from .core.stepper import TrajectorySample
from .settings import output_root as default_output_root


def determine_scenario_name(config: ScenarioConfig, fallback: str = "scenario") -> str:
    """
    Determine a filesystem-friendly scenario name.

    Preference order:
    1. `config.metadata["scenario"]`
    2. `config.metadata["name"]`
    3. Provided fallback string
    """
    for key in ("scenario", "name"):
        value = config.metadata.get(key)
        if isinstance(value, str) and value.strip():
            return _sanitize_name(value)
    return _sanitize_name(fallback)


def _sanitize_name(name: str) -> str:
    safe = "".join(ch if ch.isalnum() or ch in ("-", "_") else "_" for ch in name.strip().lower())
    return safe or "scenario"


def prepare_output_directory(output_root: Path, timestamp: Optional[str] = None) -> Path:
    """
    Create the directory where all artefacts for a simulation run will be stored.
    """
    ts = timestamp or datetime.now().strftime("%Y%m%d_%H%M%S_%f")

    output_dir = output_root / "flight_runs" / ts
    counter = 1
    while output_dir.exists():
        output_dir = output_root / "flight_runs" / f"{ts}_{counter}"
        counter += 1

    output_dir.mkdir(parents=True, exist_ok=False)
    return output_dir


def export_path_csv(samples: Iterable[TrajectorySample], output_path: Path) -> None:
    """
    Write the sampled positions to a CSV file with one row per sample.
    """
    fieldnames = ["run_id", "t", "elapsed_s", "x_m", "y_m", "z_m"]
    with output_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=fieldnames)
        writer.writeheader()
        for sample in samples:
            writer.writerow(
                {
                    "run_id": sample.run_id,
                    "t": sample.t,
                    "elapsed_s": sample.elapsed_s,
                    "x_m": sample.position.x,
                    "y_m": sample.position.y,
                    "z_m": sample.position.z,
                }
            )


def export_planned_path_csv(points: np.ndarray, output_path: Path) -> None:
    """Write an ``(N, 3)`` array of planned positions to CSV."""
    if points.ndim != 2 or points.shape[1] != 3:
        raise ValueError("Expected points array with shape (samples, 3)")
    with output_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(["index", "x_m", "y_m", "z_m"])
        for idx, (x, y, z) in enumerate(points):
            writer.writerow([idx, float(x), float(y), float(z)])


def export_run_summary_json(summary: RunSummary, config: ScenarioConfig, output_path: Path) -> None:
    """
    Write a JSON file with the run summary and the scenario inputs.
    """
    payload = {
        "flight": config.flight.model_dump(mode="json"),
        "obstacles": {
            "nodes": len(config.obstacles.nodes),
            "edges": len(config.obstacles.edges),
            "dangling_edges": config.obstacles.dangling_edges(),
        },
        "policy": config.policy.model_dump(mode="json"),
        "bounds": config.bounds.model_dump(mode="json"),
        "summary": asdict(summary),
        "metadata": config.metadata,
    }

    with output_path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)


def export_simulation_outputs(
    result: RunResult,
    config: ScenarioConfig,
    output_root: Optional[Path] = None,
    scenario_name: Optional[str] = None,
    timestamp: Optional[str] = None,
) -> Path:
    """
    Export all default artefacts for a simulation run.

    Returns the path to the directory containing the artefacts.
    """
    if output_root is None:
        output_root = default_output_root()
    else:
        output_root = Path(output_root)
    output_root.mkdir(parents=True, exist_ok=True)

    scenario_name = scenario_name or determine_scenario_name(config, fallback="scenario")
    output_dir = prepare_output_directory(output_root, timestamp=timestamp)

    export_path_csv(result.samples, output_dir / f"{scenario_name}_path.csv")
    export_run_summary_json(result.summary, config, output_dir / "run_summary.json")

    return output_dir
