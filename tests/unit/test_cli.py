"""Tests for the API server command-line launcher."""

from __future__ import annotations

import pytest

from backend.app import cli
from backend.app.config import RpcConfig, Settings

pytestmark = [pytest.mark.config]


@pytest.fixture()
def recorded_runs(monkeypatch):
    runs: list[dict] = []

    def fake_run(app, **kwargs):
        runs.append({"app": app, **kwargs})

    monkeypatch.setattr(cli.uvicorn, "run", fake_run)
    monkeypatch.setattr(
        cli,
        "load_settings",
        lambda profile=None: Settings(
            database_url="sqlite+pysqlite:///profile.db",
            rpc=RpcConfig(host="127.0.0.1", port=8000),
        ),
    )
    return runs


def test_flags_override_profile(recorded_runs):
    cli.main(["-H", "0.0.0.0", "-p", "9100", "-d", "sqlite+pysqlite:///cli.db"])

    [run] = recorded_runs
    assert (run["host"], run["port"]) == ("0.0.0.0", 9100)
    assert run["log_config"] is None


def test_resolve_settings_keeps_profile_values_without_flags(recorded_runs):
    args = cli.build_parser().parse_args([])

    settings = cli.resolve_settings(args)

    assert settings.rpc.port == 8000
    assert settings.database_url == "sqlite+pysqlite:///profile.db"


def test_resolve_settings_applies_dbhost(recorded_runs):
    args = cli.build_parser().parse_args(["--dbhost", "postgresql+psycopg://h/db"])

    settings = cli.resolve_settings(args)

    assert settings.database_url == "postgresql+psycopg://h/db"
    assert settings.rpc.host == "127.0.0.1"


def test_missing_port_exits(recorded_runs, monkeypatch):
    monkeypatch.setattr(
        cli, "load_settings", lambda profile=None: Settings(rpc=RpcConfig(port=None))
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.main([])

    assert excinfo.value.code == 1
    assert recorded_runs == []


def test_missing_database_url_exits(recorded_runs, monkeypatch):
    monkeypatch.setattr(
        cli, "load_settings", lambda profile=None: Settings(database_url=None)
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.main([])

    assert excinfo.value.code == 1
    assert recorded_runs == []
