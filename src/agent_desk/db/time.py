# src/agent_desk/db/time.py
"""Time utilities shared by models, stores and the ledger."""

from datetime import UTC, datetime, tzinfo


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def to_epoch_ms(moment: datetime) -> int:
    """Return `moment` as integer milliseconds since the Unix epoch."""
    return int(round(moment.timestamp() * 1000))


def from_epoch_ms(value: int | float, tz: tzinfo = UTC) -> datetime:
    """Build an aware datetime in `tz` from epoch milliseconds."""
    return datetime.fromtimestamp(float(value) / 1000.0, tz=tz)


def day_key(moment: datetime, tz: tzinfo | None = None) -> str:
    """Return the `YYYY-MM-DD` calendar key of `moment` in the given timezone."""
    local = moment.astimezone(tz) if tz is not None else moment
    return local.date().isoformat()
