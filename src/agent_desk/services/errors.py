"""Exceptions raised by the time-accounting core."""

from __future__ import annotations

from typing import Any


class DeskError(RuntimeError):
    """Base exception for agent desk failures."""


class InvalidTransition(DeskError):
    """Raised when a status change is not allowed.

    The only guarded transition is entering break once the daily break budget
    is exhausted. Callers revert whatever control requested the change.
    """

    def __init__(self, current: Any, requested: Any, message: str | None = None) -> None:
        self.current = current
        self.requested = requested
        super().__init__(message or f"Cannot switch from {current} to {requested}")


class PersistenceUnavailable(DeskError):
    """Raised when the remote store or the local cache cannot be reached."""


class StaleDayState(DeskError):
    """Raised when a stored day state belongs to another day or another agent."""
