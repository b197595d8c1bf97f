"""Remote snapshot store clients.

The remote store holds one document per agent per day under `{day}_{userId}`.
Agents write their own document; supervisors and the chat layer read all
documents for a day. `HttpSnapshotStore` talks to the snapshot endpoints of
the Agent Desk API.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from agent_desk.core.settings import settings
from agent_desk.schemas.snapshot import DaySnapshotRecord
from agent_desk.services.day_state import snapshot_doc_id
from agent_desk.services.errors import PersistenceUnavailable

logger = logging.getLogger(__name__)

# HTTP status codes
HTTP_OK = 200
HTTP_NOT_FOUND = 404


class SnapshotStore(ABC):
    """Async interface to the persisted day snapshots."""

    @abstractmethod
    async def fetch(self, day: str, user_id: str) -> DaySnapshotRecord | None:
        """Return the snapshot for `(day, user_id)` or None if there is none."""

    @abstractmethod
    async def save(self, record: DaySnapshotRecord) -> None:
        """Write `record`, replacing any previous version (last write wins)."""

    @abstractmethod
    async def list_for_day(self, day: str) -> list[DaySnapshotRecord]:
        """Return every snapshot recorded for `day`."""


@dataclass(frozen=True)
class SnapshotStoreConfig:
    """Immutable configuration for the HTTP snapshot store."""

    base_url: str
    timeout_seconds: float


def load_store_config() -> SnapshotStoreConfig:
    """Build configuration object from global settings."""

    return SnapshotStoreConfig(
        base_url=settings.snapshot_api_base_url.rstrip("/"),
        timeout_seconds=float(settings.snapshot_http_timeout_seconds),
    )


class HttpSnapshotStore(SnapshotStore):
    """HTTP client wrapper for the snapshot endpoints."""

    def __init__(
        self,
        access_token: str,
        config: SnapshotStoreConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or load_store_config()
        self._access_token = access_token
        self._client = client
        self._owns_client = client is None
        self._client_lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.config.base_url,
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                )
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_data: Any | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        client = await self._ensure_client()
        headers = {"Authorization": f"Bearer {self._access_token}"}
        try:
            return await client.request(
                method,
                path,
                json=json_data,
                params=params,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            raise PersistenceUnavailable(f"Snapshot store request failed: {exc}") from exc

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise PersistenceUnavailable(f"Snapshot store returned invalid JSON: {exc}") from exc

    @staticmethod
    def _parse(payload: Any) -> DaySnapshotRecord:
        try:
            return DaySnapshotRecord.model_validate(payload)
        except ValidationError as exc:
            raise PersistenceUnavailable(f"Malformed snapshot payload: {exc}") from exc

    async def fetch(self, day: str, user_id: str) -> DaySnapshotRecord | None:
        response = await self._request("GET", f"/snapshots/{snapshot_doc_id(day, user_id)}")
        if response.status_code == HTTP_NOT_FOUND:
            return None
        if response.status_code != HTTP_OK:
            raise PersistenceUnavailable(
                f"Unexpected snapshot store response ({response.status_code}) on fetch",
            )
        return self._parse(self._json(response))

    async def save(self, record: DaySnapshotRecord) -> None:
        response = await self._request(
            "PUT",
            f"/snapshots/{record.doc_id}",
            json_data=record.model_dump(mode="json", by_alias=True, exclude={"updated_at"}),
        )
        if response.status_code != HTTP_OK:
            raise PersistenceUnavailable(
                f"Unexpected snapshot store response ({response.status_code}) on save",
            )
        logger.debug("Saved snapshot %s", record.doc_id)

    async def list_for_day(self, day: str) -> list[DaySnapshotRecord]:
        response = await self._request("GET", "/snapshots", params={"day": day})
        if response.status_code != HTTP_OK:
            raise PersistenceUnavailable(
                f"Unexpected snapshot store response ({response.status_code}) on list",
            )
        return [self._parse(item) for item in self._json(response)]

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this store created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
