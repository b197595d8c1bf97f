"""Daily break budget enforcement."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from agent_desk.services.day_state import AgentStatus
from agent_desk.services.ledger import DayTimeLedger

logger = logging.getLogger(__name__)

BREAK_LIMIT_NOTICE = "break limit reached"

NoticeCallback = Callable[[str], None]


class BreakPolicy:
    """Keeps an agent from exceeding the daily break ceiling.

    The forced switch to unavailable on `enforce_on_tick` is the only
    transition in the system that the agent did not ask for.
    """

    def __init__(self, notify: NoticeCallback | None = None) -> None:
        self._notify = notify

    def can_enter_break(self, ledger: DayTimeLedger, now: datetime) -> bool:
        return ledger.can_enter_break(now)

    def enforce_on_tick(self, ledger: DayTimeLedger, now: datetime) -> bool:
        """Force `unavailable` when the break budget runs out mid-break.

        Returns True when a forced transition happened.
        """
        if ledger.status is not AgentStatus.BREAK:
            return False

        live = ledger.compute_live_usage(now)
        if live.break_used < ledger.break_limit:
            return False

        ledger.transition_to(AgentStatus.UNAVAILABLE, now)
        logger.info(
            "Break limit of %g min reached for %s; switched to unavailable",
            ledger.break_limit,
            ledger.state.user_id,
        )
        if self._notify is not None:
            self._notify(BREAK_LIMIT_NOTICE)
        return True
