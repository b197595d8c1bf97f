# src/agent_desk/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .chat import router as chat_router
from .dashboard import router as dashboard_router
from .snapshots import router as snapshots_router

__all__ = [
    "chat_router",
    "dashboard_router",
    "snapshots_router",
]
