"""
Flight-path simulation and obstacle clearance engine.

The package resolves a flight's end point, generates an arc or straight
line trajectory, steps it over elapsed time at the configured speed, and
tracks the drone's clearance from polyline obstacles while it flies.
"""

from .config import (
    ArcDirection,
    BoundsConfig,
    EndCoordMode,
    EnginePolicy,
    FlightMode,
    FlightParameters,
    ObstacleEdge,
    ObstacleSet,
    ScenarioConfig,
    load_scenario_config,
)
from .core.geometry import Point3, point_to_segment_distance
from .core.coordinates import resolve_end
from .core.trajectory import (
    FlightPlan,
    build_flight_plan,
    position,
    register_trajectory_generator,
    sample_trajectory,
    unregister_trajectory_generator,
)
from .core.stepper import AnimationStepper, StepperState, TrajectorySample, flight_duration_s
from .core.clearance import ClearanceEvaluator, ClearanceState, evaluate, minimum_distance, obstacle_segments
from .core.recorder import PathRecorder
from .core.simulation import FlightSimulator, RunResult, RunSummary, simulate_flight
from .settings import output_root, reset_settings_cache
from .exporters import (
    determine_scenario_name,
    prepare_output_directory,
    export_path_csv,
    export_run_summary_json,
    export_simulation_outputs,
)

__all__ = [
    "ArcDirection",
    "BoundsConfig",
    "EndCoordMode",
    "EnginePolicy",
    "FlightMode",
    "FlightParameters",
    "ObstacleEdge",
    "ObstacleSet",
    "ScenarioConfig",
    "load_scenario_config",
    "Point3",
    "point_to_segment_distance",
    "resolve_end",
    "FlightPlan",
    "build_flight_plan",
    "position",
    "register_trajectory_generator",
    "sample_trajectory",
    "unregister_trajectory_generator",
    "AnimationStepper",
    "StepperState",
    "TrajectorySample",
    "flight_duration_s",
    "ClearanceEvaluator",
    "ClearanceState",
    "evaluate",
    "minimum_distance",
    "obstacle_segments",
    "PathRecorder",
    "FlightSimulator",
    "RunResult",
    "RunSummary",
    "simulate_flight",
    "output_root",
    "reset_settings_cache",
    "determine_scenario_name",
    "prepare_output_directory",
    "export_path_csv",
    "export_run_summary_json",
    "export_simulation_outputs",
]
