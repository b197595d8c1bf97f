"""HTTP API for the Agent Desk service."""
