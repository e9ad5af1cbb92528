"""Tests for config loader behavior."""

from __future__ import annotations

import pytest

from backend.app.config import load_settings

pytestmark = [pytest.mark.config]


@pytest.fixture(autouse=True)
def _clear_database_url(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)


def test_load_settings_falls_back_to_defaults(monkeypatch, tmp_path):
    """Missing profiles should default to the built-in dev configuration."""

    monkeypatch.setenv("MENTAT_CONFIG_PROFILE", "missing")
    monkeypatch.setenv("MENTAT_CONFIG_DIR", str(tmp_path))
    settings = load_settings()

    assert settings.environment == "dev"
    assert settings.database_url.endswith("/mentat")
    assert settings.rpc.host == "127.0.0.1"
    assert settings.rpc.port == 8000
    assert settings.rpc.path == "/mentat/v1/"
    assert settings.logging.level == "INFO"


def test_load_settings_reads_yaml_profile(monkeypatch, tmp_path):
    """Config loader should parse YAML profiles and normalize values."""

    (tmp_path / "staging.yml").write_text(
        """
environment: staging

database:
  url: "postgresql+psycopg://mentat:pw@db:5432/custom"

rpc:
  host: 0.0.0.0
  port: "9090"
  path: rpc

logging:
  level: debug
  format: JSON
""",
        encoding="utf-8",
    )

    settings = load_settings(profile="staging", config_dir=tmp_path)

    assert settings.environment == "staging"
    assert settings.database_url.endswith("@db:5432/custom")
    assert (settings.rpc.host, settings.rpc.port) == ("0.0.0.0", 9090)
    assert settings.rpc.path == "/rpc"
    assert settings.logging.level == "DEBUG"
    assert settings.logging.format == "json"
    assert settings.raw["environment"] == "staging"


def test_database_url_env_overrides_profile(monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///override.db")

    settings = load_settings(profile="missing", config_dir=tmp_path)

    assert settings.database_url == "sqlite+pysqlite:///override.db"


def test_empty_port_disables_listening(tmp_path):
    (tmp_path / "dev.yaml").write_text("rpc:\n  port:\n", encoding="utf-8")

    settings = load_settings(config_dir=tmp_path, profile="dev")

    assert settings.rpc.port is None


def test_non_mapping_profile_is_rejected(tmp_path):
    (tmp_path / "dev.yaml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(RuntimeError, match="must be a mapping"):
        load_settings(profile="dev", config_dir=tmp_path)


def test_unparseable_profile_is_rejected(tmp_path):
    (tmp_path / "dev.yaml").write_text("rpc: [unclosed\n", encoding="utf-8")

    with pytest.raises(RuntimeError, match="Failed to parse"):
        load_settings(profile="dev", config_dir=tmp_path)
