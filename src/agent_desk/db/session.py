"""Engine and session factory for the snapshot store and chat tables.

The service defaults to a SQLite file. Request handlers run on worker threads
while the connection pool is shared, so SQLite connections are opened with
`check_same_thread` off. Schema changes go through alembic, which runs SQLite
migrations in batch mode (see migrations/env.py).
"""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from agent_desk.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base for `DaySnapshot` and the chat models."""


# Register the models on Base.metadata for alembic autogenerate.
import agent_desk.models  # noqa: E402,F401


def engine_connect_args(url: str) -> dict[str, Any]:
    """Return driver connect arguments for `url`."""
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.effective_database_url,
    connect_args=engine_connect_args(settings.effective_database_url),
    pool_pre_ping=True,
    echo=settings.sql_debug,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a request-scoped session and close it afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
