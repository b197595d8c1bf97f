"""Agent Desk: call-center agent status tracking, supervisor dashboard and chat."""

__version__ = "0.1.0"
