import logging
import threading
import time
from typing import Callable

from .blocklist import BlockList
from .config import ENFORCE_INTERVAL_SEC, LOG_NAME, TICK_INTERVAL_SEC
from .enforcement import EnforcementEngine, EnforcementReport
from .scheduler import PhaseScheduler


class PeriodicDriver:
    def __init__(
        self,
        name: str,
        interval_sec: float,
        callback: Callable[[], object],
        *,
        logger: logging.Logger | None = None,
    ):
        if interval_sec <= 0:
            raise ValueError("interval_sec must be greater than zero")
        self._name = name
        self._interval = float(interval_sec)
        self._callback = callback
        self._logger = logger or logging.getLogger(LOG_NAME)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def name(self) -> str:
        return self._name

    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and not self._stop_event.is_set()
        )

    def start(self) -> None:
        if self.is_running():
            return
        # A thread whose join timed out keeps its own, already-set event.
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run, args=(self._stop_event,), name=self._name, daemon=True
        )
        self._thread.start()
        self._logger.info(f"Driver started name={self._name} interval={self._interval}s")

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        self._logger.info(f"Driver stopped name={self._name}")

    def run_once(self) -> None:
        try:
            self._callback()
        except Exception:
            self._logger.exception(f"Driver callback failed name={self._name}")

    def _run(self, stop_event: threading.Event) -> None:
        next_due = time.monotonic() + self._interval
        while not stop_event.wait(max(0.0, next_due - time.monotonic())):
            self.run_once()
            next_due += self._interval
            now = time.monotonic()
            if now - next_due > self._interval:
                next_due = now + self._interval


def tick_driver(
    scheduler: PhaseScheduler,
    *,
    interval_sec: float = TICK_INTERVAL_SEC,
    logger: logging.Logger | None = None,
) -> PeriodicDriver:
    return PeriodicDriver("tick-driver", interval_sec, scheduler.tick, logger=logger)


def enforcement_driver(
    scheduler: PhaseScheduler,
    engine: EnforcementEngine,
    block_list: BlockList,
    *,
    on_report: Callable[[EnforcementReport], None] | None = None,
    interval_sec: float = ENFORCE_INTERVAL_SEC,
    logger: logging.Logger | None = None,
) -> PeriodicDriver:
    def _scan() -> None:
        # Gate is captured once; a pause mid-scan takes effect next cycle.
        gate = scheduler.snapshot().enforcement_gate
        report = engine.enforce_once(gate, block_list)
        if on_report is not None:
            on_report(report)

    return PeriodicDriver("enforcement-driver", interval_sec, _scan, logger=logger)
