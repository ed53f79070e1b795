from .blocklist import DEFAULT_BLOCKED_PROCESSES, BlockList
from .enforcement import EnforcementEngine, EnforcementRecord, EnforcementReport
from .process_table import (
    ProcessEntry,
    ProcessGoneError,
    ProcessTable,
    ProcessTableError,
    PsutilProcessTable,
    TerminationError,
)
from .scheduler import (
    DurationChangeResult,
    PhaseScheduler,
    PhaseTransition,
    SchedulerSnapshot,
    TimerSession,
)

__all__ = [
    "DEFAULT_BLOCKED_PROCESSES",
    "BlockList",
    "DurationChangeResult",
    "EnforcementEngine",
    "EnforcementRecord",
    "EnforcementReport",
    "PhaseScheduler",
    "PhaseTransition",
    "ProcessEntry",
    "ProcessGoneError",
    "ProcessTable",
    "ProcessTableError",
    "PsutilProcessTable",
    "SchedulerSnapshot",
    "TerminationError",
    "TimerSession",
]
