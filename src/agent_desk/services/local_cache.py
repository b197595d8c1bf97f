"""Device-scoped cache of the current day state.

Only used to resume the same agent on the same device on the same day after
a reload. It is never trusted over the remote copy for anything else.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from agent_desk.core.settings import settings
from agent_desk.schemas.snapshot import DaySnapshotRecord

logger = logging.getLogger(__name__)


class LocalDayStateCache:
    """Single-slot JSON file holding the last snapshot written on this device."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path if path is not None else settings.local_cache_path)

    def load(self) -> DaySnapshotRecord | None:
        """Return the cached record, or None if absent or unreadable."""
        if not self.path.exists():
            return None
        try:
            raw = self.path.read_text(encoding="utf-8")
            return DaySnapshotRecord.model_validate_json(raw)
        except (OSError, ValidationError, ValueError) as exc:
            logger.warning("Ignoring unreadable day state cache %s: %s", self.path, exc)
            return None

    def save(self, record: DaySnapshotRecord) -> None:
        """Write `record` to the cache; failures are logged, not raised."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                record.model_dump_json(by_alias=True, exclude={"updated_at"}),
                encoding="utf-8",
            )
        except OSError as exc:
            logger.warning("Could not write day state cache %s: %s", self.path, exc)

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove day state cache %s: %s", self.path, exc)
