"""
Flight simulation facade.

`FlightSimulator` connects the animation stepper to the path recorder and
the clearance evaluator, and publishes a `RunSummary` a short, fixed delay
after each run completes. `simulate_flight` drives it headlessly with a
fixed tick.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import numpy as np

from ..config import BoundsConfig, EnginePolicy, FlightParameters, ObstacleSet
from .clearance import ClearanceEvaluator, ClearanceState
from .geometry import Point3
from .recorder import PathRecorder
from .stepper import AnimationStepper, TrajectorySample
from .trajectory import FlightPlan, build_flight_plan

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunSummary:
    """Outcome of a completed run."""

    run_id: int
    duration_s: float
    sample_count: int
    path_length_m: float
    min_clearance_m: Optional[float]
    collided: bool
    within_bounds: bool

    @property
    def clearance_available(self) -> bool:
        return self.min_clearance_m is not None


SummaryListener = Callable[[RunSummary], None]


class FlightSimulator:
    """Single-writer engine instance: one run at a time, driven by `tick`."""

    def __init__(
        self,
        obstacles: Optional[ObstacleSet] = None,
        policy: Optional[EnginePolicy] = None,
        bounds: Optional[BoundsConfig] = None,
    ) -> None:
        self._policy = policy or EnginePolicy()
        self._bounds = bounds or BoundsConfig()
        self._obstacles = obstacles or ObstacleSet()
        self._stepper = AnimationStepper(self._policy)
        self._recorder = PathRecorder(self._policy.path_dedup_tolerance_m)
        self._clearance = ClearanceEvaluator(self._obstacles, self._policy)
        self._params: Optional[FlightParameters] = None
        self._summary_listeners: List[SummaryListener] = []
        self._sample_count = 0
        self._within_bounds = True
        self._pending_run: Optional[int] = None
        self._pending_elapsed_s = 0.0
        self._last_summary: Optional[RunSummary] = None

        self._stepper.subscribe(self._on_sample)
        self._stepper.on_complete(self._on_complete)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    @property
    def stepper(self) -> AnimationStepper:
        return self._stepper

    @property
    def params(self) -> Optional[FlightParameters]:
        return self._params

    @property
    def plan(self) -> Optional[FlightPlan]:
        return self._stepper.plan

    @property
    def running(self) -> bool:
        return self._stepper.running

    @property
    def run_id(self) -> int:
        return self._stepper.run_id

    @property
    def position(self) -> Optional[Point3]:
        return self._stepper.position

    @property
    def path(self) -> List[Point3]:
        return self._recorder.points

    @property
    def recorder(self) -> PathRecorder:
        return self._recorder

    @property
    def clearance(self) -> ClearanceState:
        return self._clearance.state

    @property
    def last_summary(self) -> Optional[RunSummary]:
        return self._last_summary

    def on_summary(self, listener: SummaryListener) -> None:
        self._summary_listeners.append(listener)

    def subscribe(self, observer: Callable[[TrajectorySample], None]) -> None:
        """Receive every sample after it has been recorded and evaluated."""
        self._stepper.subscribe(observer)

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------
    def update_obstacles(self, obstacles: ObstacleSet) -> None:
        """Replace the obstacle set; the running minimum keeps its value."""
        state = self._clearance.state
        self._obstacles = obstacles
        self._clearance = ClearanceEvaluator(obstacles, self._policy)
        self._clearance.state.running_minimum = state.running_minimum
        self._clearance.state.collided = state.collided

    def trigger(self, params: FlightParameters, token: Optional[int] = None) -> int:
        """Start a new run from a snapshot of ``params``; returns the run id."""
        if token is not None and token <= self._stepper.run_id and self._params is not None:
            return self._stepper.run_id
        self._params = params
        self._recorder.clear()
        self._clearance.reset()
        self._sample_count = 0
        self._within_bounds = True
        self._pending_run = None
        self._pending_elapsed_s = 0.0
        return self._stepper.trigger(build_flight_plan(params), token)

    def tick(self, delta_s: float) -> Optional[TrajectorySample]:
        """
        Advance the simulation by ``delta_s`` seconds.

        While idle after a completed run, the same clock counts down the
        completion delay before the run summary is published.
        """
        if self._stepper.running:
            return self._stepper.advance(delta_s)
        if delta_s < 0:
            raise ValueError(f"Elapsed time must be non-negative, got {delta_s}")
        if self._pending_run is not None:
            self._pending_elapsed_s += delta_s
            if self._pending_elapsed_s >= self._policy.completion_delay_s:
                self._publish_summary(self._pending_run)
        return None

    @property
    def summary_pending(self) -> bool:
        return self._pending_run is not None

    # ------------------------------------------------------------------
    # Stepper callbacks
    # ------------------------------------------------------------------
    def _on_sample(self, sample: TrajectorySample) -> None:
        self._sample_count += 1
        self._recorder.record(sample.position)
        self._clearance.observe(sample.position)
        if self._within_bounds and not self._bounds.contains(sample.position.x, sample.position.y):
            self._within_bounds = False
            logger.warning(
                "Run %d leaves the %.1f x %.1f m flight area at (%.3f, %.3f)",
                sample.run_id,
                self._bounds.width_m,
                self._bounds.height_m,
                sample.position.x,
                sample.position.y,
            )

    def _on_complete(self, run_id: int) -> None:
        self._pending_run = run_id
        self._pending_elapsed_s = 0.0
        if self._policy.completion_delay_s == 0:
            self._publish_summary(run_id)

    def _publish_summary(self, run_id: int) -> None:
        self._pending_run = None
        state = self._clearance.state
        summary = RunSummary(
            run_id=run_id,
            duration_s=self._stepper.duration_s,
            sample_count=self._sample_count,
            path_length_m=self._recorder.length_m(),
            min_clearance_m=state.running_minimum,
            collided=state.collided,
            within_bounds=self._within_bounds,
        )
        self._last_summary = summary
        logger.debug("Run %d summary: %s", run_id, summary)
        for listener in list(self._summary_listeners):
            listener(summary)


@dataclass
class RunResult:
    """Everything a headless run produced."""

    params: FlightParameters
    summary: RunSummary
    samples: List[TrajectorySample] = field(default_factory=list)
    path: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.float64))


def simulate_flight(
    params: FlightParameters,
    obstacles: Optional[ObstacleSet] = None,
    frame_rate_hz: float = 60.0,
    policy: Optional[EnginePolicy] = None,
    bounds: Optional[BoundsConfig] = None,
) -> RunResult:
    """Run one flight to completion with a fixed tick of ``1 / frame_rate_hz``."""
    if frame_rate_hz <= 0:
        raise ValueError("frame_rate_hz must be positive")

    simulator = FlightSimulator(obstacles, policy=policy, bounds=bounds)
    samples: List[TrajectorySample] = []
    simulator.subscribe(samples.append)
    simulator.trigger(params)

    dt = 1.0 / frame_rate_hz
    while simulator.last_summary is None:
        simulator.tick(dt)

    return RunResult(
        params=params,
        summary=simulator.last_summary,
        samples=samples,
        path=simulator.recorder.as_array(),
    )
