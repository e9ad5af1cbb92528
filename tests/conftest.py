"""Shared fixtures resetting process-wide state between tests."""

from __future__ import annotations

import pytest

from backend.app.api.dependencies import get_settings, reset_entry_gateway
from backend.app.infra.db import dispose_engine


@pytest.fixture(autouse=True)
def _reset_process_state():
    yield
    reset_entry_gateway()
    get_settings.cache_clear()
    dispose_engine()
