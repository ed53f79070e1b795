import os
import logging
import threading
from dataclasses import dataclass, field
from typing import Literal

from .blocklist import BlockList
from .config import LOG_NAME
from .process_table import ProcessGoneError, ProcessTable

Outcome = Literal["terminated", "skipped", "failed"]

OUTCOME_TERMINATED = "terminated"
OUTCOME_SKIPPED = "skipped"
OUTCOME_FAILED = "failed"


@dataclass(frozen=True)
class EnforcementRecord:
    pid: int
    process_name: str
    outcome: Outcome
    reason: str | None = None
    terminated_count: int = 0


@dataclass(frozen=True)
class EnforcementReport:
    gate: bool
    records: tuple[EnforcementRecord, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.records

    @property
    def terminated(self) -> list[EnforcementRecord]:
        return [r for r in self.records if r.outcome == OUTCOME_TERMINATED]

    @property
    def skipped(self) -> list[EnforcementRecord]:
        return [r for r in self.records if r.outcome == OUTCOME_SKIPPED]

    @property
    def failed(self) -> list[EnforcementRecord]:
        return [r for r in self.records if r.outcome == OUTCOME_FAILED]


class EnforcementEngine:
    def __init__(
        self,
        process_table: ProcessTable,
        *,
        logger: logging.Logger | None = None,
        own_pid: int | None = None,
    ):
        self._table = process_table
        self._logger = logger or logging.getLogger(LOG_NAME)
        self._own_pid = os.getpid() if own_pid is None else own_pid
        self._lock = threading.Lock()
        self._terminated_total = 0

    @property
    def terminated_total(self) -> int:
        with self._lock:
            return self._terminated_total

    def enforce_once(self, gate: bool, block_list: BlockList) -> EnforcementReport:
        if not gate:
            return EnforcementReport(gate=False)

        try:
            entries = self._table.list_processes()
        except Exception:
            self._logger.exception("Process enumeration failed")
            return EnforcementReport(gate=True)

        records: list[EnforcementRecord] = []
        for entry in entries:
            name = entry.name or ""
            if not block_list.matches(name):
                continue
            records.append(self._terminate(entry.pid, name))

        terminated = sum(1 for r in records if r.outcome == OUTCOME_TERMINATED)
        if terminated:
            with self._lock:
                self._terminated_total += terminated
        return EnforcementReport(gate=True, records=tuple(records))

    def _terminate(self, pid: int, name: str) -> EnforcementRecord:
        if pid == self._own_pid:
            return EnforcementRecord(pid, name, OUTCOME_SKIPPED, reason="own process")
        try:
            count = self._table.terminate_tree(pid)
        except ProcessGoneError as e:
            return EnforcementRecord(pid, name, OUTCOME_SKIPPED, reason=str(e) or "process gone")
        except Exception as e:
            reason = str(e) or type(e).__name__
            self._logger.warning(f"Terminate failed app={name} pid={pid} reason={reason}")
            return EnforcementRecord(pid, name, OUTCOME_FAILED, reason=reason)

        self._logger.info(f"Terminated app={name} pid={pid} tree={count}")
        return EnforcementRecord(pid, name, OUTCOME_TERMINATED, terminated_count=int(count or 0))
