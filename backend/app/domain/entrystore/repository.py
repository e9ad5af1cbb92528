"""Persistence adapters for entries."""

from __future__ import annotations

from datetime import datetime, timezone
from threading import RLock
from typing import Any, Dict, List, Mapping, Optional, Protocol

from sqlalchemy import (
    MetaData,
    Table,
    delete,
    exists,
    func,
    insert,
    literal,
    or_,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ...infra.db import get_engine
from ...infra.logging import get_logger
from .errors import DuplicateEntryError, EntryNotFoundError, EntryStoreError
from .models import Entry, EntryMetadata
from .query import EntryQuery
from .schema import ENTRIES_TABLE_NAME

__all__ = [
    "EntryRepository",
    "InMemoryEntryRepository",
    "SqlEntryRepository",
    "build_entry_repository",
]

logger = get_logger(__name__)

NOT_FOUND = "not found"


class EntryRepository(Protocol):  # pragma: no cover - interface only
    """Document-store operations the gateway relies on.

    Lookups raise :class:`EntryNotFoundError` when nothing matches; store
    faults raise :class:`EntryStoreError`.
    """

    def find_one(
        self,
        user_id: str,
        *,
        uuid: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Entry: ...

    def find_all(self, query: EntryQuery) -> List[Entry]: ...

    def insert(self, entry: Entry) -> Entry: ...

    def upsert(self, entry: Entry) -> Entry: ...

    def remove_one(self, user_id: str, uuid: str) -> None: ...

    def remove_many(self, query: EntryQuery) -> int: ...

    def count(self, query: EntryQuery) -> int: ...


class InMemoryEntryRepository(EntryRepository):
    """Simple in-memory store used for local development and tests."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._entries: Dict[tuple[str, str], Entry] = {}

    def find_one(
        self,
        user_id: str,
        *,
        uuid: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Entry:
        with self._lock:
            if uuid is not None:
                entry = self._entries.get((user_id, uuid))
                if entry is not None and (content is None or entry.content == content):
                    return entry
                raise EntryNotFoundError(NOT_FOUND)
            for entry in self._entries.values():
                if entry.user_id == user_id and entry.content == content:
                    return entry
        raise EntryNotFoundError(NOT_FOUND)

    def find_all(self, query: EntryQuery) -> List[Entry]:
        with self._lock:
            return [entry for entry in self._entries.values() if query.matches(entry)]

    def insert(self, entry: Entry) -> Entry:
        with self._lock:
            key = (entry.user_id, entry.uuid)
            if key in self._entries:
                raise DuplicateEntryError(f"uuid '{entry.uuid}' already stored")
            if self._has_content(entry.user_id, entry.content, exclude_uuid=None):
                raise DuplicateEntryError("content already stored")
            self._entries[key] = entry
        return entry

    def upsert(self, entry: Entry) -> Entry:
        with self._lock:
            if self._has_content(entry.user_id, entry.content, exclude_uuid=entry.uuid):
                raise DuplicateEntryError("content already stored")
            self._entries[(entry.user_id, entry.uuid)] = entry
        return entry

    def remove_one(self, user_id: str, uuid: str) -> None:
        with self._lock:
            if self._entries.pop((user_id, uuid), None) is None:
                raise EntryNotFoundError(NOT_FOUND)

    def remove_many(self, query: EntryQuery) -> int:
        with self._lock:
            doomed = [key for key, entry in self._entries.items() if query.matches(entry)]
            for key in doomed:
                del self._entries[key]
        return len(doomed)

    def count(self, query: EntryQuery) -> int:
        with self._lock:
            return sum(1 for entry in self._entries.values() if query.matches(entry))

    def _has_content(
        self, user_id: str, content: str, *, exclude_uuid: Optional[str]
    ) -> bool:
        return any(
            entry.user_id == user_id
            and entry.content == content
            and entry.uuid != exclude_uuid
            for entry in self._entries.values()
        )


class SqlEntryRepository(EntryRepository):
    """SQLAlchemy-backed adapter persisting entries to a shared table."""

    def __init__(
        self,
        engine: Optional[Engine] = None,
        *,
        table: Optional[Table] = None,
    ) -> None:
        self._engine = engine or get_engine()
        if table is not None:
            self._entries = table
        else:
            try:
                self._entries = Table(
                    ENTRIES_TABLE_NAME, MetaData(), autoload_with=self._engine
                )
            except SQLAlchemyError as exc:
                raise EntryStoreError(
                    f"cannot load table '{ENTRIES_TABLE_NAME}': {exc}"
                ) from exc

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def find_one(
        self,
        user_id: str,
        *,
        uuid: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Entry:
        c = self._entries.c
        conditions = [c.user_id == user_id]
        if uuid is not None:
            conditions.append(c.uuid == uuid)
        if content is not None:
            conditions.append(c.content == content)
        stmt = select(self._entries).where(*conditions).limit(1)
        try:
            with self._engine.begin() as conn:
                row = conn.execute(stmt).mappings().first()
        except SQLAlchemyError as exc:
            raise EntryStoreError(str(exc)) from exc
        if row is None:
            raise EntryNotFoundError(NOT_FOUND)
        return _row_to_entry(row)

    def find_all(self, query: EntryQuery) -> List[Entry]:
        stmt = select(self._entries).where(*self._build_conditions(query))
        try:
            with self._engine.begin() as conn:
                rows = conn.execute(stmt).mappings().all()
        except SQLAlchemyError as exc:
            raise EntryStoreError(str(exc)) from exc
        return [_row_to_entry(row) for row in rows]

    def count(self, query: EntryQuery) -> int:
        stmt = (
            select(func.count())
            .select_from(self._entries)
            .where(*self._build_conditions(query))
        )
        try:
            with self._engine.begin() as conn:
                return int(conn.execute(stmt).scalar_one())
        except SQLAlchemyError as exc:
            raise EntryStoreError(str(exc)) from exc

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def insert(self, entry: Entry) -> Entry:
        stmt = insert(self._entries).values(**_entry_to_values(entry))
        try:
            with self._engine.begin() as conn:
                conn.execute(stmt)
        except IntegrityError as exc:
            raise DuplicateEntryError(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            raise EntryStoreError(str(exc)) from exc
        return entry

    def upsert(self, entry: Entry) -> Entry:
        c = self._entries.c
        values = _entry_to_values(entry)
        update_stmt = (
            update(self._entries)
            .where(c.user_id == entry.user_id, c.uuid == entry.uuid)
            .values(**values)
        )
        try:
            with self._engine.begin() as conn:
                result = conn.execute(update_stmt)
                if result.rowcount == 0:
                    logger.info(
                        "entry_upsert_recreated",
                        extra={"user_id": entry.user_id, "uuid": entry.uuid},
                    )
                    conn.execute(insert(self._entries).values(**values))
        except IntegrityError as exc:
            raise DuplicateEntryError(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            raise EntryStoreError(str(exc)) from exc
        return entry

    def remove_one(self, user_id: str, uuid: str) -> None:
        c = self._entries.c
        stmt = delete(self._entries).where(c.user_id == user_id, c.uuid == uuid)
        try:
            with self._engine.begin() as conn:
                removed = conn.execute(stmt).rowcount
        except SQLAlchemyError as exc:
            raise EntryStoreError(str(exc)) from exc
        if not removed:
            raise EntryNotFoundError(NOT_FOUND)

    def remove_many(self, query: EntryQuery) -> int:
        stmt = delete(self._entries).where(*self._build_conditions(query))
        try:
            with self._engine.begin() as conn:
                return int(conn.execute(stmt).rowcount)
        except SQLAlchemyError as exc:
            raise EntryStoreError(str(exc)) from exc

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _build_conditions(self, query: EntryQuery) -> tuple:
        c = self._entries.c
        conditions: list[Any] = [c.user_id == query.user_id]
        if query.types:
            conditions.append(c.type.in_(query.types))
        if query.uuids:
            conditions.append(c.uuid.in_(query.uuids))
        if query.content:
            description = c["metadata"]["description"].as_string()
            conditions.append(
                or_(
                    c.content.icontains(query.content, autoescape=True),
                    description.icontains(query.content, autoescape=True),
                )
            )
        if query.tags:
            conditions.append(self._tags_overlap(query.tags))
        if query.priority:
            conditions.append(c.priority == query.priority)
        return tuple(conditions)

    def _tags_overlap(self, tags: tuple[str, ...]) -> Any:
        """EXISTS over the elements of the ``tags`` array, compared whole."""

        if self._engine.dialect.name == "postgresql":
            expand = func.json_array_elements_text
        else:
            expand = func.json_each
        elements = expand(self._entries.c.tags).table_valued("value")
        return exists(
            select(literal(1))
            .select_from(elements)
            .where(elements.c.value.in_(tags))
        )


def build_entry_repository(
    *,
    prefer_sql: bool = True,
    fallback_to_memory: bool = False,
) -> EntryRepository:
    """Factory that returns the desired entry repository implementation."""

    if prefer_sql:
        try:
            return SqlEntryRepository()
        except Exception:
            if not fallback_to_memory:
                raise
            logger.warning(
                "sql_entry_repository_unavailable_falling_back",
                exc_info=True,
            )
    return InMemoryEntryRepository()


def _entry_to_values(entry: Entry) -> Dict[str, Any]:
    return {
        "uuid": entry.uuid,
        "user_id": entry.user_id,
        "content": entry.content,
        "type": entry.type,
        "tags": list(entry.tags),
        "scheduled": entry.scheduled,
        "deadline": entry.deadline,
        "added_at": entry.added_at,
        "modified_at": entry.modified_at,
        "priority": entry.priority,
        "todo_status": entry.todo_status,
        "metadata": entry.metadata.to_dict() if entry.metadata else None,
    }


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _row_to_entry(row: Mapping[str, Any]) -> Entry:
    return Entry(
        uuid=row["uuid"],
        user_id=row["user_id"],
        content=row["content"],
        type=row["type"],
        added_at=_as_utc(row["added_at"]),
        modified_at=_as_utc(row["modified_at"]),
        tags=list(row.get("tags") or []),
        scheduled=_as_utc(row.get("scheduled")),
        deadline=_as_utc(row.get("deadline")),
        priority=row.get("priority"),
        todo_status=row.get("todo_status"),
        metadata=EntryMetadata.from_dict(row.get("metadata")),
    )
