"""
Time-based stepping of a flight along its trajectory.

The stepper owns the run/idle state machine. It is advanced by an
externally supplied elapsed time, so the simulated progress does not
depend on how often it is ticked.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from ..config import EnginePolicy
from .geometry import Point3
from .trajectory import FlightPlan, plan_position

logger = logging.getLogger(__name__)


class StepperState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class TrajectorySample:
    """Position emitted for one advance of a run."""

    run_id: int
    t: float
    elapsed_s: float
    position: Point3
    final: bool = False


SampleObserver = Callable[[TrajectorySample], None]
CompletionListener = Callable[[int], None]


def flight_duration_s(plan: FlightPlan, policy: Optional[EnginePolicy] = None) -> float:
    """
    Duration of a run at the plan's speed (100 % = 1 m/s).

    The speed is floored at ``policy.min_speed_mps`` and the duration at
    ``policy.min_run_duration_s``.
    """
    policy = policy or EnginePolicy()
    speed_mps = max(policy.min_speed_mps, plan.speed_percent / 100.0)
    return max(policy.min_run_duration_s, plan.distance_m / speed_mps)


class AnimationStepper:
    """Advance the normalized time of the current run and publish samples.

    Every sample goes to the subscribed observers in increasing ``t``. A
    trigger supersedes the run in progress at once: once the run id has
    changed, no observer or completion listener is called for the old run,
    even when the trigger comes from inside one of those callbacks.
    """

    def __init__(self, policy: Optional[EnginePolicy] = None) -> None:
        self._policy = policy or EnginePolicy()
        self._observers: List[SampleObserver] = []
        self._completion_listeners: List[CompletionListener] = []
        self._state = StepperState.IDLE
        self._plan: Optional[FlightPlan] = None
        self._duration_s = 0.0
        self._t = 0.0
        self._elapsed_s = 0.0
        self._run_id = 0

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------
    def subscribe(self, observer: SampleObserver) -> None:
        self._observers.append(observer)

    def on_complete(self, listener: CompletionListener) -> None:
        self._completion_listeners.append(listener)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def state(self) -> StepperState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state is StepperState.RUNNING

    @property
    def t(self) -> float:
        return self._t

    @property
    def run_id(self) -> int:
        return self._run_id

    @property
    def plan(self) -> Optional[FlightPlan]:
        return self._plan

    @property
    def duration_s(self) -> float:
        return self._duration_s

    @property
    def position(self) -> Optional[Point3]:
        if self._plan is None:
            return None
        return plan_position(self._t, self._plan)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def trigger(self, plan: FlightPlan, token: Optional[int] = None) -> int:
        """
        Start a new run for ``plan`` and return its run id.

        ``token`` is the caller's increasing trigger counter. A token that is
        not newer than the current run id is ignored; omitting it allocates
        the next id.
        """
        if token is not None and token <= self._run_id and self._plan is not None:
            if token < self._run_id:
                logger.debug("Ignoring stale trigger token %d (current run %d)", token, self._run_id)
            return self._run_id
        if self.running:
            logger.debug("Run %d superseded at t=%.4f", self._run_id, self._t)

        self._run_id = self._run_id + 1 if token is None else token
        self._plan = plan
        self._duration_s = flight_duration_s(plan, self._policy)
        self._t = 0.0
        self._elapsed_s = 0.0
        self._state = StepperState.RUNNING
        logger.debug(
            "Run %d started: %s flight over %.3f m, duration %.3f s",
            self._run_id,
            plan.mode_name,
            plan.distance_m,
            self._duration_s,
        )

        self._emit(TrajectorySample(self._run_id, 0.0, 0.0, plan_position(0.0, plan)))
        return self._run_id

    def advance(self, delta_s: float) -> Optional[TrajectorySample]:
        """
        Move the current run forward by ``delta_s`` seconds of wall-clock time.

        Returns the emitted sample, or None when no run is in progress.

        Raises
        ------
        ValueError
            If ``delta_s`` is negative.
        """
        if delta_s < 0:
            raise ValueError(f"Elapsed time must be non-negative, got {delta_s}")
        if not self.running or self._plan is None:
            return None

        run_id = self._run_id
        self._t = min(1.0, self._t + delta_s / self._duration_s)
        self._elapsed_s += delta_s
        finished = self._t >= 1.0
        if finished:
            self._state = StepperState.IDLE

        sample = TrajectorySample(
            run_id=run_id,
            t=self._t,
            elapsed_s=self._elapsed_s,
            position=plan_position(self._t, self._plan),
            final=finished,
        )
        self._emit(sample)

        if finished and self._run_id == run_id:
            logger.debug("Run %d complete after %.3f s", run_id, self._elapsed_s)
            for listener in list(self._completion_listeners):
                if self._run_id != run_id:
                    break
                listener(run_id)
        return sample

    def _emit(self, sample: TrajectorySample) -> None:
        for observer in list(self._observers):
            if self._run_id != sample.run_id:
                break
            observer(sample)
