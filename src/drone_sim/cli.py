"""
Command-line interface for the flight clearance simulator.

Usage:
    drone-simulator simulate path/to/scenario.yaml [--output outputs] [--frame-rate 60] [--no-export]
    drone-simulator validate path/to/scenario.yaml [--verbose]
    drone-simulator preview path/to/scenario.yaml [--samples 200] [--output planned.csv]
    drone-simulator scaffold path/to/new_scenario.yaml [--scenario NAME] [--mode arc]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from . import (
    build_flight_plan,
    export_simulation_outputs,
    load_scenario_config,
    minimum_distance,
    obstacle_segments,
    sample_trajectory,
    simulate_flight,
)
from .config import EndCoordMode, FlightMode, ScenarioConfig
from .core.geometry import Point3
from .core.stepper import flight_duration_s
from .core.trajectory import discover_trajectory_plugins
from .exporters import export_planned_path_csv
from .scaffold import write_stub
from .settings import default_frame_rate

Logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(message)s")


def add_shared_config_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "config",
        type=Path,
        help="Path to the YAML scenario file describing the flight and obstacles.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="drone-simulator",
        description="Simulate drone flights and check their clearance from obstacle edges.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    simulate_parser = subparsers.add_parser(
        "simulate",
        help="Fly the scenario to completion and export the path (.csv) and run summary (.json).",
    )
    add_shared_config_argument(simulate_parser)
    simulate_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Root directory for exported artefacts (defaults to DRONE_SIM_OUTPUTS or outputs/).",
    )
    simulate_parser.add_argument(
        "--frame-rate",
        type=float,
        default=None,
        help="Tick rate of the headless run in Hz (defaults to the scenario, then DRONE_SIM_FRAME_RATE).",
    )
    simulate_parser.add_argument(
        "--no-export",
        action="store_true",
        help="Only log the summary; do not write artefacts.",
    )
    simulate_parser.add_argument(
        "--timestamp",
        type=str,
        default=None,
        help="Override timestamp component of the output directory (mainly for testing).",
    )

    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate the scenario; prints a summary without simulating.",
    )
    add_shared_config_argument(validate_parser)

    preview_parser = subparsers.add_parser(
        "preview",
        help="Sample the planned trajectory without time stepping and report its clearance.",
    )
    add_shared_config_argument(preview_parser)
    preview_parser.add_argument("--samples", type=int, default=200, help="Number of samples (default 200).")
    preview_parser.add_argument("--output", type=Path, help="Optional path to save the planned path CSV.")

    scaffold_parser = subparsers.add_parser(
        "scaffold",
        help="Create a stub YAML scenario.",
    )
    scaffold_parser.add_argument("path", type=Path, help="Path where the YAML stub will be written.")
    scaffold_parser.add_argument("--scenario", type=str, default="new_scenario", help="Scenario name metadata.")
    scaffold_parser.add_argument(
        "--mode",
        type=str,
        choices=[mode.value for mode in FlightMode],
        default=FlightMode.ARC.value,
        help="Flight profile of the stub (default arc).",
    )

    return parser


def _format_point(point: Point3) -> str:
    return f"({point.x:.3f}, {point.y:.3f}, {point.z:.3f}) m"


def _format_clearance(value: Optional[float]) -> str:
    return f"{value:.3f} m" if value is not None else "--"


def summarize_configuration(config_path: Path, config: Optional[ScenarioConfig] = None) -> str:
    if config is None:
        config = load_scenario_config(config_path)
    flight = config.flight
    plan = build_flight_plan(flight)
    lines = [
        f"Configuration: {config_path}",
        f"  Flight: {flight.mode.value}"
        + (f" ({flight.arc_direction.value})" if flight.mode is FlightMode.ARC else "")
        + f" at {flight.speed_percent:g} %",
        f"  Start: {_format_point(plan.start)}",
        f"  End ({flight.end_coord_mode.value}"
        + (f", heading {flight.heading_deg:g} deg" if flight.end_coord_mode is EndCoordMode.LOCAL else "")
        + f"): {_format_point(plan.end)}",
        f"  Z offset: {plan.z_offset_m:.3f} m",
        f"  Distance: {plan.distance_m:.3f} m | Duration: {flight_duration_s(plan, config.policy):.3f} s",
        f"  Obstacles: {len(config.obstacles.nodes)} nodes, {len(config.obstacles.edges)} edges",
        f"  Bounds: {config.bounds.width_m:g} x {config.bounds.height_m:g} m",
        f"  Collision threshold: {config.policy.collision_threshold_m:g} m",
    ]
    return "\n".join(lines)


def _warn_dangling_edges(config: ScenarioConfig) -> None:
    dangling = config.obstacles.dangling_edges()
    if dangling:
        Logger.warning(
            "%d obstacle edge(s) reference missing nodes and will be ignored: %s",
            len(dangling),
            dangling,
        )


def simulate_command(args: argparse.Namespace) -> int:
    config_path: Path = args.config
    if not config_path.exists():
        Logger.error("Configuration file not found: %s", config_path)
        return 2

    try:
        config = load_scenario_config(config_path)
        _warn_dangling_edges(config)
        frame_rate = args.frame_rate or config.simulation.frame_rate_hz or default_frame_rate()
        result = simulate_flight(
            config.flight,
            config.obstacles,
            frame_rate_hz=frame_rate,
            policy=config.policy,
            bounds=config.bounds,
        )
        summary = result.summary
        Logger.info(
            "Flight complete: %.3f s, %d samples, path %.3f m",
            summary.duration_s,
            summary.sample_count,
            summary.path_length_m,
        )
        Logger.info(
            "Minimal clearance: %s%s",
            _format_clearance(summary.min_clearance_m),
            " (Collision!)" if summary.collided else "",
        )
        if not summary.within_bounds:
            Logger.warning("The flight left the %g x %g m area.", config.bounds.width_m, config.bounds.height_m)

        if not args.no_export:
            output_dir = export_simulation_outputs(
                result,
                config,
                output_root=args.output,
                timestamp=args.timestamp,
            )
            Logger.info("Artefacts written to: %s", output_dir)
        return 0
    except Exception as exc:  # pylint: disable=broad-except
        Logger.error("Simulation failed: %s", exc)
        if Logger.isEnabledFor(logging.DEBUG):
            Logger.exception("Stack trace")
        return 1


def validate_command(args: argparse.Namespace) -> int:
    config_path: Path = args.config
    if not config_path.exists():
        Logger.error("Configuration file not found: %s", config_path)
        return 2

    try:
        config = load_scenario_config(config_path)
        print(summarize_configuration(config_path, config=config))
        _warn_dangling_edges(config)
        if not config.obstacles.valid_edges():
            Logger.warning("No valid obstacle edges; clearance will be unavailable.")
        Logger.info("Validation succeeded.")
        return 0
    except Exception as exc:  # pylint: disable=broad-except
        Logger.error("Validation failed: %s", exc)
        if Logger.isEnabledFor(logging.DEBUG):
            Logger.exception("Stack trace")
        return 1


def preview_command(args: argparse.Namespace) -> int:
    config_path: Path = args.config
    if not config_path.exists():
        Logger.error("Configuration file not found: %s", config_path)
        return 2

    try:
        config = load_scenario_config(config_path)
        points = sample_trajectory(build_flight_plan(config.flight), samples=args.samples)
        segments = obstacle_segments(config.obstacles)
        distances = [minimum_distance(Point3.from_array(p), segments) for p in points]
    except Exception as exc:  # noqa: BLE001
        Logger.error("Preview failed: %s", exc)
        return 1

    planned = min(distances) if segments else None
    Logger.info("Preview succeeded: %d samples", points.shape[0])
    Logger.info(
        "Planned minimal clearance: %s%s",
        _format_clearance(planned),
        " (Collision!)" if planned is not None and planned <= config.policy.collision_threshold_m else "",
    )

    if args.output:
        try:
            output_path = Path(args.output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            export_planned_path_csv(points, output_path)
            Logger.info("Planned path saved to %s", output_path)
        except Exception as exc:  # noqa: BLE001
            Logger.error("Failed to write planned path: %s", exc)
            return 1

    return 0


def scaffold_command(args: argparse.Namespace) -> int:
    try:
        write_stub(target_path=args.path, scenario_name=args.scenario, mode=FlightMode(args.mode))
    except Exception as exc:  # noqa: BLE001
        Logger.error("Scaffold failed: %s", exc)
        return 1

    Logger.info("Scenario stub written to %s", args.path)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    discover_trajectory_plugins()

    if args.command == "simulate":
        return simulate_command(args)
    if args.command == "validate":
        return validate_command(args)
    if args.command == "preview":
        return preview_command(args)
    if args.command == "scaffold":
        return scaffold_command(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
