"""Shared API dependencies."""

from __future__ import annotations

from functools import lru_cache

from ..config import Settings, load_settings
from ..domain.entrystore.gateway import EntryStoreGateway
from ..domain.entrystore.repository import build_entry_repository

__all__ = ["get_entry_gateway", "get_settings", "reset_entry_gateway"]


@lru_cache()
def _entry_gateway_singleton() -> EntryStoreGateway:
    return EntryStoreGateway(build_entry_repository())


def get_entry_gateway() -> EntryStoreGateway:
    """Return the process-wide entry store gateway instance."""

    return _entry_gateway_singleton()


def reset_entry_gateway() -> None:
    """Drop the cached gateway so the next call rebinds to a fresh engine."""

    _entry_gateway_singleton.cache_clear()


@lru_cache()
def get_settings() -> Settings:
    """Return settings loaded once from the active profile."""

    return load_settings()
