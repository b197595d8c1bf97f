# tests/test_settings.py
import os
import subprocess
import sys
from pathlib import Path

import pytest

from agent_desk.core.settings import Settings
from agent_desk.db.session import engine_connect_args

SRC_ROOT = Path(__file__).resolve().parents[1] / "src"


def test_secret_key_is_optional(monkeypatch: pytest.MonkeyPatch) -> None:
    """Agent devices load settings without the token verification key."""
    monkeypatch.delenv("SECRET_KEY", raising=False)
    assert Settings(_env_file=None).secret_key is None


def test_client_library_imports_without_secret_key(tmp_path: Path) -> None:
    env = {key: value for key, value in os.environ.items() if key != "SECRET_KEY"}
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_ROOT), env.get("PYTHONPATH")]))
    result = subprocess.run(
        [
            sys.executable,
            "-c",
            "from agent_desk.services.ledger import DayTimeLedger\n"
            "from agent_desk.services.agent_session import AgentSession\n",
        ],
        cwd=tmp_path,
        env=env,
        capture_output=True,
        text=True,
        check=False,
    )
    assert result.returncode == 0, result.stderr


def test_test_database_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./desk.db")
    monkeypatch.setenv("TEST_DATABASE_URL", "sqlite://")
    monkeypatch.setenv("USE_TEST_DATABASE", "true")
    assert Settings(_env_file=None).effective_database_url == "sqlite://"

    monkeypatch.setenv("USE_TEST_DATABASE", "false")
    assert Settings(_env_file=None).effective_database_url == "sqlite:///./desk.db"


def test_sqlite_connections_are_shared_across_threads() -> None:
    assert engine_connect_args("sqlite:///./desk.db") == {"check_same_thread": False}
    assert engine_connect_args("postgresql://desk@db/desk") == {}
