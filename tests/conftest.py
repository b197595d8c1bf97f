# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "agent-desk-test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from agent_desk.core.clock import Clock, get_clock
from agent_desk.core.settings import settings
from agent_desk.db.session import Base
from agent_desk.db.session import get_db as app_get_session
from agent_desk.db.time import to_epoch_ms
from agent_desk.main import app as fastapi_app
from agent_desk.schemas.snapshot import DaySnapshotRecord
from agent_desk.services.day_state import AgentIdentity, snapshot_doc_id
from agent_desk.services.errors import PersistenceUnavailable
from agent_desk.services.local_cache import LocalDayStateCache
from agent_desk.services.snapshot_store import SnapshotStore

TEST_DB_URL = "sqlite://"
TODAY = "2025-01-02"
T0 = datetime(2025, 1, 2, 9, 0, tzinfo=UTC)


class FakeClock(Clock):
    """Clock pinned to a settable instant."""

    def __init__(self, start: datetime = T0) -> None:
        super().__init__(UTC)
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, minutes: float = 0.0, seconds: float = 0.0) -> datetime:
        self.current = self.current + timedelta(minutes=minutes, seconds=seconds)
        return self.current

    def set(self, moment: datetime) -> None:
        self.current = moment


class InMemorySnapshotStore(SnapshotStore):
    """Dictionary-backed snapshot store with switchable failures."""

    def __init__(self) -> None:
        self.records: dict[str, DaySnapshotRecord] = {}
        self.saved: list[DaySnapshotRecord] = []
        self.fail_reads = False
        self.fail_writes = False
        self.fetch_calls = 0

    async def fetch(self, day: str, user_id: str) -> DaySnapshotRecord | None:
        self.fetch_calls += 1
        if self.fail_reads:
            raise PersistenceUnavailable("store offline")
        return self.records.get(snapshot_doc_id(day, user_id))

    async def save(self, record: DaySnapshotRecord) -> None:
        if self.fail_writes:
            raise PersistenceUnavailable("store offline")
        self.records[record.doc_id] = record
        self.saved.append(record)

    async def list_for_day(self, day: str) -> list[DaySnapshotRecord]:
        if self.fail_reads:
            raise PersistenceUnavailable("store offline")
        return [record for record in self.records.values() if record.day == day]


def make_record(
    user_id: str = "agent01",
    *,
    day: str = TODAY,
    status: str = "operating",
    last_change: datetime = T0,
    login: datetime | None = None,
    name: str = "Agent 01",
    role: str = "AGENT",
    **minutes: float,
) -> DaySnapshotRecord:
    """Build a snapshot record with epoch-ms timestamps."""
    return DaySnapshotRecord(
        user_id=user_id,
        name=name,
        role=role,
        day=day,
        status=status,
        login_time=to_epoch_ms(login or last_change),
        last_status_change_at=to_epoch_ms(last_change),
        **minutes,
    )


def make_token(user_id: str, name: str = "", role: str = "AGENT", secret: str | None = None) -> str:
    """Mint an identity token the way the identity provider would."""
    payload = {"sub": user_id, "name": name, "role": role}
    return jwt.encode(payload, secret or settings.secret_key, algorithm=settings.jwt_algorithm)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def restart_savepoint(sess: Session, trans) -> None:  # pragma: no cover - SQLAlchemy internals
        if trans.nested and not getattr(trans._parent, "nested", False):
            session.begin_nested()

    try:
        yield session
    finally:
        event.remove(session, "after_transaction_end", restart_savepoint)
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def clock() -> FakeClock:
    """A clock pinned to 2025-01-02 09:00 UTC."""
    return FakeClock()


@pytest.fixture(autouse=True)
def override_dependencies(app: FastAPI, db_session: Session, clock: FakeClock) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_clock] = lambda: clock
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_clock, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def agent() -> AgentIdentity:
    return AgentIdentity(user_id="agent01", name="Agent 01", role="AGENT")


@pytest.fixture()
def other_agent() -> AgentIdentity:
    return AgentIdentity(user_id="agent02", name="Agent 02", role="AGENT")


@pytest.fixture()
def token_headers() -> Callable[[AgentIdentity], dict[str, str]]:
    def _headers(identity: AgentIdentity) -> dict[str, str]:
        token = make_token(identity.user_id, identity.name, identity.role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
def auth_headers(agent: AgentIdentity, token_headers) -> dict[str, str]:
    """Authorization headers for the primary agent."""
    return token_headers(agent)


@pytest.fixture()
def other_auth_headers(other_agent: AgentIdentity, token_headers) -> dict[str, str]:
    """Authorization headers for the secondary agent."""
    return token_headers(other_agent)


@pytest.fixture()
def supervisor_headers(token_headers) -> dict[str, str]:
    return token_headers(AgentIdentity(user_id="dema", name="Supervisor Dema", role="SUPERVISOR"))


@pytest.fixture()
def store() -> InMemorySnapshotStore:
    return InMemorySnapshotStore()


@pytest.fixture()
def cache(tmp_path: Any) -> LocalDayStateCache:
    return LocalDayStateCache(tmp_path / "cache" / "day_state.json")
