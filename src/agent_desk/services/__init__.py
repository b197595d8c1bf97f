# src/agent_desk/services/__init__.py
"""Business logic services for the Agent Desk application."""

from .agent_session import AgentSession, DeskView, build_view
from .aggregator import StatusBoardWatcher, count_statuses, live_summary, presence_entries
from .break_policy import BREAK_LIMIT_NOTICE, BreakPolicy
from .day_state import (
    AgentIdentity,
    AgentStatus,
    DayState,
    PresenceTier,
    presence_tier,
    snapshot_doc_id,
)
from .errors import DeskError, InvalidTransition, PersistenceUnavailable, StaleDayState
from .ledger import (
    DayTimeLedger,
    LiveUsage,
    break_remaining,
    compute_worked_minutes,
    format_minutes,
)
from .local_cache import LocalDayStateCache
from .presence import PresencePublisher
from .recovery import RecoveredState, SessionRecoveryManager
from .snapshot_store import HttpSnapshotStore, SnapshotStore
from .ticker import RepeatingTask

__all__ = [
    "AgentIdentity",
    "AgentSession",
    "AgentStatus",
    "BREAK_LIMIT_NOTICE",
    "BreakPolicy",
    "DayState",
    "DayTimeLedger",
    "DeskError",
    "DeskView",
    "HttpSnapshotStore",
    "InvalidTransition",
    "LiveUsage",
    "LocalDayStateCache",
    "PersistenceUnavailable",
    "PresencePublisher",
    "PresenceTier",
    "RecoveredState",
    "RepeatingTask",
    "SessionRecoveryManager",
    "SnapshotStore",
    "StaleDayState",
    "StatusBoardWatcher",
    "break_remaining",
    "build_view",
    "compute_worked_minutes",
    "count_statuses",
    "format_minutes",
    "live_summary",
    "presence_entries",
    "presence_tier",
    "snapshot_doc_id",
]
