"""Wall-clock provider used by the ledger, recovery and API layers."""

from __future__ import annotations

from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo

from agent_desk.core.settings import settings
from agent_desk.db.time import day_key, utcnow


class Clock:
    """Timezone-aware wall clock.

    All ledger arithmetic happens on aware datetimes; the timezone only matters
    for deciding which calendar day an instant belongs to.
    """

    def __init__(self, tz: tzinfo | str | None = None) -> None:
        if tz is None:
            tz = settings.desk_timezone
        self.tz: tzinfo = ZoneInfo(tz) if isinstance(tz, str) else tz

    def now(self) -> datetime:
        """Return the current instant in the desk timezone."""
        return utcnow().astimezone(self.tz)

    def today_key(self, now: datetime | None = None) -> str:
        """Return the day key for `now` (or the current instant)."""
        return day_key(now if now is not None else self.now(), self.tz)


def get_clock() -> Clock:
    """Return a clock configured from settings."""
    return Clock()
