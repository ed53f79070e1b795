import logging
import threading
from dataclasses import dataclass
from typing import Callable

from .config import LOG_NAME
from .scheduler import SchedulerSnapshot


@dataclass(frozen=True)
class PresentationState:
    pin_top_most: bool
    compact_view: bool
    top_most_lock: bool


class PresentationStateController:
    def __init__(
        self,
        set_always_on_top: Callable[[bool], None],
        *,
        on_compact_change: Callable[[bool], None] | None = None,
        logger: logging.Logger | None = None,
    ):
        self._set_always_on_top = set_always_on_top
        self._on_compact_change = on_compact_change
        self._logger = logger or logging.getLogger(LOG_NAME)
        self._lock = threading.Lock()

        self._compact_view = False
        self._top_most_lock = False
        self._running = False
        self._pinned: bool | None = None

    def state(self) -> PresentationState:
        with self._lock:
            return PresentationState(
                pin_top_most=self._running and self._top_most_lock,
                compact_view=self._compact_view,
                top_most_lock=self._top_most_lock,
            )

    def sync(self, snapshot: SchedulerSnapshot) -> bool:
        with self._lock:
            self._running = snapshot.is_running
            desired = self._running and self._top_most_lock
            if desired == self._pinned:
                return desired
            self._pinned = desired
        self._apply_pin(desired)
        return desired

    def on_focus_regained(self) -> None:
        with self._lock:
            desired = self._running and self._top_most_lock
            self._pinned = desired
        self._apply_pin(desired)

    def toggle_top_most_lock(self, snapshot: SchedulerSnapshot) -> bool:
        with self._lock:
            self._top_most_lock = not self._top_most_lock
            enabled = self._top_most_lock
        self._logger.info(f"Top-most lock toggled enabled={enabled}")
        self.sync(snapshot)
        return enabled

    def toggle_compact_view(self) -> bool:
        with self._lock:
            self._compact_view = not self._compact_view
            compact = self._compact_view
        self._logger.info(f"Compact view toggled compact={compact}")
        if self._on_compact_change is not None:
            try:
                self._on_compact_change(compact)
            except Exception:
                self._logger.exception("Compact view change failed")
        return compact

    def _apply_pin(self, value: bool) -> None:
        try:
            self._set_always_on_top(value)
        except Exception:
            self._logger.exception("Always-on-top request failed")
