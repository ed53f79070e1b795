import logging
import threading
from dataclasses import dataclass
from typing import Callable, Literal

from .config import (
    BREAK_MINUTES_RANGE,
    DEFAULT_BREAK_MINUTES,
    DEFAULT_WORK_MINUTES,
    LOG_NAME,
    WORK_MINUTES_RANGE,
)
from .utils import seconds_to_mmss

RunState = Literal["idle", "running", "paused"]
Phase = Literal["work", "break"]

STATE_IDLE = "idle"
STATE_RUNNING = "running"
STATE_PAUSED = "paused"

PHASE_WORK = "work"
PHASE_BREAK = "break"

REASON_UPDATED = "updated"
REASON_RUNNING = "running"
REASON_OUT_OF_RANGE = "out_of_range"
REASON_INVALID = "invalid"


@dataclass
class TimerSession:
    work_duration_seconds: int
    break_duration_seconds: int
    state: RunState = STATE_IDLE
    phase: Phase = PHASE_WORK
    remaining_seconds: int = 0
    transitions: int = 0

    def duration_for(self, phase: Phase) -> int:
        if phase == PHASE_WORK:
            return self.work_duration_seconds
        return self.break_duration_seconds


@dataclass(frozen=True)
class SchedulerSnapshot:
    state: RunState
    phase: Phase
    remaining_seconds: int
    work_duration_seconds: int
    break_duration_seconds: int
    transitions: int = 0

    @property
    def is_running(self) -> bool:
        return self.state == STATE_RUNNING

    @property
    def is_paused(self) -> bool:
        return self.state == STATE_PAUSED

    @property
    def is_idle(self) -> bool:
        return self.state == STATE_IDLE

    @property
    def enforcement_gate(self) -> bool:
        return self.state == STATE_RUNNING and self.phase == PHASE_WORK

    @property
    def remaining_mmss(self) -> str:
        return seconds_to_mmss(self.remaining_seconds)

    def has_durations(self, work_minutes: int, break_minutes: int) -> bool:
        return (
            self.work_duration_seconds == work_minutes * 60
            and self.break_duration_seconds == break_minutes * 60
        )

    @property
    def phase_label(self) -> str:
        if self.phase == PHASE_WORK:
            return "Phase: WORK (blocking enabled)"
        return "Phase: BREAK (blocking off)"


@dataclass(frozen=True)
class PhaseTransition:
    previous: Phase
    current: Phase
    snapshot: SchedulerSnapshot

    @property
    def is_break_start(self) -> bool:
        return self.current == PHASE_BREAK


@dataclass(frozen=True)
class DurationChangeResult:
    accepted: bool
    reason: str
    snapshot: SchedulerSnapshot


TransitionListener = Callable[[PhaseTransition], None]


class PhaseScheduler:
    def __init__(
        self,
        *,
        work_minutes: int = DEFAULT_WORK_MINUTES,
        break_minutes: int = DEFAULT_BREAK_MINUTES,
        logger: logging.Logger | None = None,
    ):
        if work_minutes <= 0 or break_minutes <= 0:
            raise ValueError("work_minutes and break_minutes must be greater than zero")

        work_sec = int(work_minutes) * 60
        self._session = TimerSession(
            work_duration_seconds=work_sec,
            break_duration_seconds=int(break_minutes) * 60,
            remaining_seconds=work_sec,
        )
        self._logger = logger or logging.getLogger(LOG_NAME)
        self._lock = threading.Lock()
        self._tick_lock = threading.Lock()
        self._listeners: list[TransitionListener] = []

    # Commands
    def start(self) -> SchedulerSnapshot:
        with self._lock:
            s = self._session
            if s.state == STATE_RUNNING:
                return self._snapshot_locked()
            if s.remaining_seconds <= 0:
                s.phase = PHASE_WORK
                s.remaining_seconds = s.work_duration_seconds
            resumed = s.state == STATE_PAUSED
            s.state = STATE_RUNNING
            snap = self._snapshot_locked()
        if resumed:
            self._logger.info(f"Timer resumed phase={snap.phase} remaining={snap.remaining_seconds}s")
        else:
            self._logger.info(f"Timer started phase={snap.phase} remaining={snap.remaining_seconds}s")
        return snap

    def pause(self) -> SchedulerSnapshot:
        with self._lock:
            if self._session.state != STATE_RUNNING:
                return self._snapshot_locked()
            self._session.state = STATE_PAUSED
            snap = self._snapshot_locked()
        self._logger.info(f"Timer paused phase={snap.phase} remaining={snap.remaining_seconds}s")
        return snap

    def reset(self) -> SchedulerSnapshot:
        with self._lock:
            s = self._session
            s.state = STATE_IDLE
            s.phase = PHASE_WORK
            s.remaining_seconds = s.work_duration_seconds
            snap = self._snapshot_locked()
        self._logger.info("Timer reset")
        return snap

    def set_durations(self, work_minutes: int, break_minutes: int) -> DurationChangeResult:
        with self._lock:
            if self._session.state == STATE_RUNNING:
                result = DurationChangeResult(False, REASON_RUNNING, self._snapshot_locked())
            elif not (_is_minutes(work_minutes) and _is_minutes(break_minutes)):
                result = DurationChangeResult(False, REASON_INVALID, self._snapshot_locked())
            elif not (
                _in_range(work_minutes, WORK_MINUTES_RANGE)
                and _in_range(break_minutes, BREAK_MINUTES_RANGE)
            ):
                result = DurationChangeResult(False, REASON_OUT_OF_RANGE, self._snapshot_locked())
            else:
                s = self._session
                s.work_duration_seconds = int(work_minutes) * 60
                s.break_duration_seconds = int(break_minutes) * 60
                if s.state == STATE_IDLE:
                    s.phase = PHASE_WORK
                    s.remaining_seconds = s.work_duration_seconds
                result = DurationChangeResult(True, REASON_UPDATED, self._snapshot_locked())

        if result.accepted:
            self._logger.info(f"Durations updated work={work_minutes}m break={break_minutes}m")
        else:
            self._logger.warning(
                f"Durations rejected reason={result.reason} work={work_minutes!r} break={break_minutes!r}"
            )
        return result

    # Clock
    def tick(self) -> PhaseTransition | None:
        with self._tick_lock:
            with self._lock:
                s = self._session
                if s.state != STATE_RUNNING:
                    return None
                s.remaining_seconds -= 1
                if s.remaining_seconds > 0:
                    return None

                previous = s.phase
                s.phase = PHASE_BREAK if previous == PHASE_WORK else PHASE_WORK
                s.remaining_seconds = s.duration_for(s.phase)
                s.transitions += 1
                transition = PhaseTransition(previous, s.phase, self._snapshot_locked())
                listeners = list(self._listeners)

            self._logger.info(f"Phase transition {previous} -> {transition.current}")
            for listener in listeners:
                try:
                    listener(transition)
                except Exception:
                    self._logger.exception("Phase transition listener failed")
            return transition

    def snapshot(self) -> SchedulerSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def add_transition_listener(self, listener: TransitionListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_transition_listener(self, listener: TransitionListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _snapshot_locked(self) -> SchedulerSnapshot:
        s = self._session
        return SchedulerSnapshot(
            state=s.state,
            phase=s.phase,
            remaining_seconds=s.remaining_seconds,
            work_duration_seconds=s.work_duration_seconds,
            break_duration_seconds=s.break_duration_seconds,
            transitions=s.transitions,
        )


def _is_minutes(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _in_range(value: int, bounds: tuple[int, int]) -> bool:
    low, high = bounds
    return low <= value <= high
