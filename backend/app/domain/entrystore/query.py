"""Conjunctive entry queries built from optional search clauses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .models import DEFAULT_ENTRY_TYPES, Entry
from .validation import normalize_tags

__all__ = ["EntryQuery", "build_search_query", "build_type_query"]


@dataclass(frozen=True)
class EntryQuery:
    """Filter over one user's entries.

    Every non-empty clause is ANDed; an empty clause is absent, not a wildcard
    match on empty values. ``content`` matches case-insensitively against the
    entry content OR its metadata description.
    """

    user_id: str
    types: tuple[str, ...] = tuple()
    content: Optional[str] = None
    tags: tuple[str, ...] = tuple()
    priority: Optional[str] = None
    uuids: tuple[str, ...] = tuple()

    def matches(self, entry: Entry) -> bool:
        if entry.user_id != self.user_id:
            return False
        if self.types and entry.type not in self.types:
            return False
        if self.uuids and entry.uuid not in self.uuids:
            return False
        if self.content:
            needle = self.content.lower()
            description = entry.metadata.description if entry.metadata else ""
            if needle not in entry.content.lower() and needle not in description.lower():
                return False
        if self.tags and not set(self.tags).intersection(entry.tags):
            return False
        if self.priority and entry.priority != self.priority:
            return False
        return True


def _resolve_types(
    types: Optional[Iterable[str]], default_types: Sequence[str]
) -> tuple[str, ...]:
    resolved = tuple(value for value in types or () if value)
    return resolved or tuple(default_types)


def build_search_query(
    user_id: str,
    *,
    types: Optional[Iterable[str]] = None,
    content: Optional[str] = None,
    tags: Optional[Iterable[str]] = None,
    priority: Optional[str] = None,
    default_types: Sequence[str] = DEFAULT_ENTRY_TYPES,
) -> EntryQuery:
    """Combine the supplied search filters; types fall back to ``default_types``."""

    return EntryQuery(
        user_id=user_id,
        types=_resolve_types(types, default_types),
        content=content or None,
        tags=tuple(normalize_tags(tag for tag in tags or () if tag)),
        priority=priority or None,
    )


def build_type_query(
    user_id: str,
    types: Optional[Iterable[str]] = None,
    *,
    default_types: Sequence[str] = DEFAULT_ENTRY_TYPES,
) -> EntryQuery:
    return EntryQuery(user_id=user_id, types=_resolve_types(types, default_types))
