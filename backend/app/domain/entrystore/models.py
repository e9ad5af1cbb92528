"""Entry data models shared by the gateway and repositories."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

__all__ = [
    "DEFAULT_ENTRY_TYPES",
    "Entry",
    "EntryMetadata",
    "EntryPatch",
    "EntryType",
    "next_modified_at",
    "utcnow",
]


def utcnow() -> datetime:
    """Return timezone-aware UTC timestamp."""

    return datetime.now(timezone.utc)


def next_modified_at(previous: Optional[datetime]) -> datetime:
    """Return a modification stamp strictly later than ``previous``."""

    now = utcnow()
    if previous is None:
        return now
    if previous.tzinfo is None:
        previous = previous.replace(tzinfo=timezone.utc)
    if now <= previous:
        return previous + timedelta(microseconds=1)
    return now


class EntryType(str, Enum):
    """Closed set of entry kinds accepted by the store."""

    PIM = "pim"
    BOOKMARK = "bookmark"
    ORG = "org"


DEFAULT_ENTRY_TYPES: tuple[str, ...] = (
    EntryType.PIM.value,
    EntryType.BOOKMARK.value,
    EntryType.ORG.value,
)


@dataclass(frozen=True)
class EntryMetadata:
    """Provenance details attached to bookmarks and imported notes."""

    description: str = ""
    time_added_origin: str = ""
    hash_origin: str = ""
    meta_origin: str = ""
    from_: str = ""

    def is_empty(self) -> bool:
        return not any(
            (
                self.description,
                self.time_added_origin,
                self.hash_origin,
                self.meta_origin,
                self.from_,
            )
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "description": self.description,
            "time_added_origin": self.time_added_origin,
            "hash_origin": self.hash_origin,
            "meta_origin": self.meta_origin,
            "from": self.from_,
        }

    @classmethod
    def from_dict(cls, payload: Optional[Dict[str, Any]]) -> Optional["EntryMetadata"]:
        if not payload:
            return None
        metadata = cls(
            description=str(payload.get("description") or ""),
            time_added_origin=str(payload.get("time_added_origin") or ""),
            hash_origin=str(payload.get("hash_origin") or ""),
            meta_origin=str(payload.get("meta_origin") or ""),
            from_=str(payload.get("from") or ""),
        )
        return None if metadata.is_empty() else metadata


@dataclass(frozen=True)
class Entry:
    """A stored bookmark, PIM note or org item owned by one user."""

    uuid: str
    user_id: str
    content: str
    type: str
    added_at: datetime
    modified_at: datetime
    tags: List[str] = field(default_factory=list)
    scheduled: Optional[datetime] = None
    deadline: Optional[datetime] = None
    priority: Optional[str] = None
    todo_status: Optional[str] = None
    metadata: Optional[EntryMetadata] = None

    @classmethod
    def new(
        cls,
        *,
        user_id: str,
        content: str,
        entry_type: str,
        tags: Optional[List[str]] = None,
        scheduled: Optional[datetime] = None,
        deadline: Optional[datetime] = None,
        priority: Optional[str] = None,
        todo_status: Optional[str] = None,
        metadata: Optional[EntryMetadata] = None,
        timestamp: Optional[datetime] = None,
    ) -> "Entry":
        """Mint a fresh entry with a new uuid and matching timestamps."""

        ts = timestamp or utcnow()
        return cls(
            uuid=str(uuid4()),
            user_id=user_id,
            content=content,
            type=entry_type,
            added_at=ts,
            modified_at=ts,
            tags=list(tags or []),
            scheduled=scheduled,
            deadline=deadline,
            priority=priority,
            todo_status=todo_status,
            metadata=metadata if metadata and not metadata.is_empty() else None,
        )

    def with_changes(self, **changes: Any) -> "Entry":
        return replace(self, **changes)


@dataclass(frozen=True)
class EntryPatch:
    """Mutable fields accepted by Update; ``None`` means "leave unchanged"."""

    type: Optional[str] = None
    content: Optional[str] = None
    tags: Optional[List[str]] = None
    scheduled: Optional[str] = None
    deadline: Optional[str] = None
    priority: Optional[str] = None
    todo_status: Optional[str] = None
