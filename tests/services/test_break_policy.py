# mypy: ignore-errors
# tests/services/test_break_policy.py
"""Tests for the daily break ceiling."""

from datetime import timedelta

import pytest

from agent_desk.services.break_policy import BREAK_LIMIT_NOTICE, BreakPolicy
from agent_desk.services.day_state import AgentStatus, DayState
from agent_desk.services.ledger import DayTimeLedger
from tests.conftest import T0, TODAY


@pytest.fixture
def notices():
    return []


@pytest.fixture
def policy(notices):
    return BreakPolicy(notify=notices.append)


def _on_break(used: float) -> DayTimeLedger:
    state = DayState.fresh("agent01", TODAY, T0)
    state.status = AgentStatus.BREAK
    state.minutes_by_status[AgentStatus.BREAK] = used
    return DayTimeLedger(state, break_limit=45.0, epsilon=0.01)


class TestEnforceOnTick:
    def test_break_with_budget_left_is_untouched(self, policy, notices) -> None:
        """A tick inside the budget changes nothing."""
        ledger = _on_break(44.0)
        assert policy.enforce_on_tick(ledger, T0 + timedelta(seconds=30)) is False
        assert ledger.status is AgentStatus.BREAK
        assert notices == []

    def test_exhausted_break_forces_unavailable(self, policy, notices) -> None:
        """44 min used plus 2 min more on break ends at exactly 45 and unavailable."""
        ledger = _on_break(44.0)
        now = T0 + timedelta(minutes=2)

        assert policy.enforce_on_tick(ledger, now) is True

        assert ledger.status is AgentStatus.UNAVAILABLE
        assert ledger.state.minutes_by_status[AgentStatus.BREAK] == 45.0
        assert ledger.state.last_status_change_at == now
        assert notices == [BREAK_LIMIT_NOTICE]

    def test_notice_fires_once(self, policy, notices) -> None:
        """Later ticks do not repeat the forced switch."""
        ledger = _on_break(44.0)
        policy.enforce_on_tick(ledger, T0 + timedelta(minutes=2))
        policy.enforce_on_tick(ledger, T0 + timedelta(minutes=3))
        policy.enforce_on_tick(ledger, T0 + timedelta(minutes=4))

        assert notices == [BREAK_LIMIT_NOTICE]
        live = ledger.compute_live_usage(T0 + timedelta(minutes=4))
        assert live.break_used == 45.0
        assert live.unavailable == pytest.approx(2.0)

    def test_other_statuses_are_ignored(self, policy, notices) -> None:
        ledger = _on_break(45.0)
        ledger.state.status = AgentStatus.OPERATING
        assert policy.enforce_on_tick(ledger, T0 + timedelta(minutes=10)) is False
        assert notices == []

    def test_works_without_notifier(self) -> None:
        ledger = _on_break(45.0)
        assert BreakPolicy().enforce_on_tick(ledger, T0 + timedelta(seconds=1)) is True
        assert ledger.status is AgentStatus.UNAVAILABLE


def test_can_enter_break_reflects_ledger(policy) -> None:
    """Break can be entered again only while budget remains."""
    ledger = _on_break(44.0)
    ledger.state.status = AgentStatus.OPERATING
    assert policy.can_enter_break(ledger, T0) is True

    ledger.state.minutes_by_status[AgentStatus.BREAK] = 45.0
    assert policy.can_enter_break(ledger, T0) is False
