"""Tests for structured log formatting."""

from __future__ import annotations

import json
import logging

import pytest

from backend.app.infra.logging import JsonFormatter, KeyValueFormatter, get_logger

pytestmark = [pytest.mark.infra]


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "mentat.domain", logging.INFO, __file__, 1, "entry_added", (), None
    )
    record.__dict__.update(extra)
    return record


def test_get_logger_nests_package_loggers_under_service_root():
    assert get_logger("backend.app.domain.entrystore.gateway").name == (
        "mentat.domain.entrystore.gateway"
    )
    assert get_logger("uvicorn").name == "uvicorn"


def test_key_value_formatter_appends_sorted_extra():
    line = KeyValueFormatter().format(_record(uuid="u-1", user_id="alice"))

    assert line.endswith("entry_added user_id='alice' uuid='u-1'")


def test_json_formatter_emits_event_and_extra():
    payload = json.loads(JsonFormatter().format(_record(deleted=3)))

    assert payload["event"] == "entry_added"
    assert payload["level"] == "info"
    assert payload["deleted"] == 3
