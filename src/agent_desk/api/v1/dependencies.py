"""Shared API dependencies for authentication and common functionality."""

import logging
from datetime import date
from typing import Annotated

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from agent_desk.core.clock import Clock, get_clock
from agent_desk.core.settings import settings
from agent_desk.db.session import get_db
from agent_desk.repositories.snapshot_repo import SnapshotRepository
from agent_desk.services.day_state import AgentIdentity

logger = logging.getLogger(__name__)

# HTTP Bearer scheme for identity tokens issued by the identity provider
bearer_scheme = HTTPBearer()

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
ClockDep = Annotated[Clock, Depends(get_clock)]


def get_current_agent(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
) -> AgentIdentity:
    """Get the calling agent from the bearer token.

    Tokens are minted by the external identity provider. `sub` carries the
    user id; `name` and `role` are optional display claims.

    Raises:
        HTTPException: If the token is invalid or has no subject, or if no
            verification key is configured
    """
    if not settings.secret_key:
        logger.error("SECRET_KEY is not set; rejecting identity token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err

    subject = payload.get("sub")
    if not subject:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    return AgentIdentity(
        user_id=str(subject),
        name=str(payload.get("name") or ""),
        role=str(payload.get("role") or ""),
    )


def get_snapshot_repository(db: SessionDep) -> SnapshotRepository:
    """Return a snapshot repository bound to the request session."""
    return SnapshotRepository(db)


def resolve_day(
    clock: ClockDep,
    day: Annotated[str | None, Query(description="Day key YYYY-MM-DD; defaults to today")] = None,
) -> str:
    """Validate the `day` query parameter, defaulting to today's key."""
    if day is None:
        return clock.today_key()
    try:
        return date.fromisoformat(day).isoformat()
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="day must be formatted as YYYY-MM-DD",
        ) from err


# Type aliases for dependencies
CurrentAgentDep = Annotated[AgentIdentity, Depends(get_current_agent)]
SnapshotRepoDep = Annotated[SnapshotRepository, Depends(get_snapshot_repository)]
DayDep = Annotated[str, Depends(resolve_day)]
