"""Entry store gateway: validation, normalization and entry lifecycle."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from ...infra.logging import get_logger
from .errors import (
    DomainError,
    DuplicateEntryError,
    EntryNotFoundError,
    EntryStoreError,
)
from .models import (
    DEFAULT_ENTRY_TYPES,
    Entry,
    EntryMetadata,
    EntryPatch,
    EntryType,
    next_modified_at,
    utcnow,
)
from .query import EntryQuery, build_search_query, build_type_query
from .repository import EntryRepository
from .validation import (
    MSG_USER_ID_MISSING,
    normalize_tags,
    normalize_todo_status,
    parse_timestamp,
    require_content,
    require_entry_type,
    require_user_id,
    validate_priority,
)

__all__ = [
    "BULK_DELETE_THRESHOLD",
    "DeleteResult",
    "EntryStoreGateway",
    "MessageResult",
    "SearchResult",
    "StatsResult",
]

logger = get_logger(__name__)

BULK_DELETE_THRESHOLD = 10
UNSET_COUNT = -1

MSG_ALREADY_EXISTS = "already exists, skipping"
MSG_NO_UUID = "No UUID found, cannot proceed with updating"
MSG_UUID_NOT_FOUND = "No entry with provided UUID"
MSG_UPDATED = "updated"
MSG_NO_IDENTIFIERS = "no identifiers provided"


@dataclass
class MessageResult:
    """Result of Add/Update; ``message`` carries either a uuid or a failure."""

    message: str = ""


@dataclass
class DeleteResult:
    error: str = ""
    deleted_count: int = 0


@dataclass
class StatsResult:
    error: str = ""
    whole: int = UNSET_COUNT
    bookmarks: int = UNSET_COUNT
    pim: int = UNSET_COUNT
    org: int = UNSET_COUNT


@dataclass
class SearchResult:
    error: str = ""
    count: int = 0
    entries: List[Entry] = field(default_factory=list)


class EntryStoreGateway:
    """Entry-scoped operations over a per-user partition of the store.

    Domain failures (missing identifiers, bad type, malformed priority,
    lookups that find nothing, store faults) are returned in the result's
    ``message``/``error`` field. Malformed ``scheduled``/``deadline`` values
    raise :class:`TimestampFormatError` instead.

    Add's duplicate check and insert are two store calls; concurrent identical
    submissions are caught only by the store's uniqueness constraint.
    """

    def __init__(
        self,
        repository: EntryRepository,
        *,
        default_types: Sequence[str] = DEFAULT_ENTRY_TYPES,
        bulk_delete_threshold: int = BULK_DELETE_THRESHOLD,
    ) -> None:
        self._repository = repository
        self._default_types = tuple(default_types)
        self._bulk_delete_threshold = bulk_delete_threshold

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def add(
        self,
        user_id: Optional[str],
        *,
        entry_type: Optional[str],
        content: Optional[str],
        tags: Optional[Iterable[str]] = None,
        metadata: Optional[EntryMetadata] = None,
        scheduled: Optional[str] = None,
        deadline: Optional[str] = None,
        priority: Optional[str] = None,
        todo_status: Optional[str] = None,
    ) -> MessageResult:
        try:
            user_id = require_user_id(user_id)
            entry_type = require_entry_type(entry_type, self._default_types)
            content = require_content(content)
        except DomainError as exc:
            logger.info("entry_add_rejected", extra={"reason": exc.message})
            return MessageResult(message=exc.message)

        logger.info(
            "entry_add_received",
            extra={"user_id": user_id, "type": entry_type, "content": content},
        )
        try:
            self._repository.find_one(user_id, content=content)
        except EntryNotFoundError:
            pass
        except EntryStoreError as exc:
            logger.warning("entry_add_lookup_failed", extra={"error": str(exc)})
            return MessageResult(message=f"store error: {exc}")
        else:
            logger.info("entry_add_duplicate", extra={"user_id": user_id})
            return MessageResult(message=MSG_ALREADY_EXISTS)

        normalized_tags = normalize_tags(tags)
        scheduled_at = (
            parse_timestamp(scheduled, field_name="scheduled") if scheduled else None
        )
        deadline_at = (
            parse_timestamp(deadline, field_name="deadline") if deadline else None
        )
        timestamp = utcnow()
        try:
            checked_priority = validate_priority(priority) if priority else None
        except DomainError as exc:
            logger.info(
                "entry_add_rejected",
                extra={"reason": exc.message, "priority": priority},
            )
            return MessageResult(message=exc.message)

        entry = Entry.new(
            user_id=user_id,
            content=content,
            entry_type=entry_type,
            tags=normalized_tags,
            scheduled=scheduled_at,
            deadline=deadline_at,
            priority=checked_priority,
            todo_status=normalize_todo_status(todo_status) if todo_status else None,
            metadata=metadata,
            timestamp=timestamp,
        )
        try:
            self._repository.insert(entry)
        except DuplicateEntryError:
            logger.info("entry_add_duplicate", extra={"user_id": user_id})
            return MessageResult(message=MSG_ALREADY_EXISTS)
        except EntryStoreError as exc:
            logger.warning("entry_insert_failed", extra={"error": str(exc)})
            return MessageResult(message=f"failed to insert entry: {exc}")
        logger.info(
            "entry_added", extra={"user_id": user_id, "uuid": entry.uuid}
        )
        return MessageResult(message=entry.uuid)

    def update(
        self,
        user_id: Optional[str],
        uuid: Optional[str],
        patch: EntryPatch,
    ) -> MessageResult:
        """Overwrite only the supplied fields of an existing entry.

        Empty strings and empty lists count as "not supplied", so a field can
        never be cleared through Update. The write is an upsert keyed by uuid:
        an entry removed between lookup and write is recreated.
        """

        if not user_id:
            return MessageResult(message=MSG_USER_ID_MISSING)
        if not uuid:
            return MessageResult(message=MSG_NO_UUID)
        try:
            current = self._repository.find_one(user_id, uuid=uuid)
        except EntryNotFoundError:
            return MessageResult(message=MSG_UUID_NOT_FOUND)
        except EntryStoreError as exc:
            logger.warning("entry_update_lookup_failed", extra={"error": str(exc)})
            return MessageResult(message=f"store error: {exc}")

        changes: dict = {}
        try:
            if patch.type:
                changes["type"] = require_entry_type(patch.type, self._default_types)
            if patch.content:
                changes["content"] = patch.content
            if patch.tags:
                changes["tags"] = normalize_tags(patch.tags)
            if patch.scheduled:
                changes["scheduled"] = parse_timestamp(
                    patch.scheduled, field_name="scheduled"
                )
            if patch.deadline:
                changes["deadline"] = parse_timestamp(
                    patch.deadline, field_name="deadline"
                )
            if patch.priority:
                changes["priority"] = validate_priority(patch.priority)
        except DomainError as exc:
            logger.info(
                "entry_update_rejected", extra={"uuid": uuid, "reason": exc.message}
            )
            return MessageResult(message=exc.message)
        if patch.todo_status:
            changes["todo_status"] = normalize_todo_status(patch.todo_status)
        changes["modified_at"] = next_modified_at(current.modified_at)

        updated = current.with_changes(**changes)
        try:
            self._repository.upsert(updated)
        except EntryStoreError as exc:
            logger.warning(
                "entry_update_failed", extra={"uuid": uuid, "error": str(exc)}
            )
            return MessageResult(message=f"update failed: {exc}")
        logger.info(
            "entry_updated",
            extra={"user_id": user_id, "uuid": uuid, "fields": sorted(changes)},
        )
        return MessageResult(message=MSG_UPDATED)

    def delete(
        self, user_id: Optional[str], uuids: Optional[Sequence[str]]
    ) -> DeleteResult:
        """Remove entries by uuid.

        More than ``bulk_delete_threshold`` identifiers go through one bulk
        removal; otherwise each uuid is removed separately and failures are
        collected without aborting the rest.
        """

        if not user_id:
            return DeleteResult(error=MSG_USER_ID_MISSING, deleted_count=UNSET_COUNT)
        identifiers = [value for value in uuids or () if value]
        if not identifiers:
            return DeleteResult(error=MSG_NO_IDENTIFIERS, deleted_count=UNSET_COUNT)

        if len(identifiers) > self._bulk_delete_threshold:
            query = EntryQuery(user_id=user_id, uuids=tuple(identifiers))
            try:
                removed = self._repository.remove_many(query)
            except EntryStoreError as exc:
                logger.warning("entry_bulk_delete_failed", extra={"error": str(exc)})
                return DeleteResult(
                    error=f"delete failed: {exc}", deleted_count=UNSET_COUNT
                )
            logger.info(
                "entries_deleted",
                extra={"user_id": user_id, "mode": "bulk", "deleted": removed},
            )
            return DeleteResult(deleted_count=removed)

        deleted = 0
        failed: List[str] = []
        for identifier in identifiers:
            try:
                self._repository.remove_one(user_id, identifier)
            except (EntryNotFoundError, EntryStoreError):
                failed.append(identifier)
            else:
                deleted += 1
        result = DeleteResult(deleted_count=deleted)
        if failed:
            result.error = f"failed to delete entries: {', '.join(failed)}"
        logger.info(
            "entries_deleted",
            extra={
                "user_id": user_id,
                "mode": "per_item",
                "deleted": deleted,
                "failed": len(failed),
            },
        )
        return result

    def cleanup(
        self, user_id: Optional[str], types: Optional[Iterable[str]] = None
    ) -> DeleteResult:
        if not user_id:
            return DeleteResult(error=MSG_USER_ID_MISSING, deleted_count=0)
        query = build_type_query(user_id, types, default_types=self._default_types)
        try:
            removed = self._repository.remove_many(query)
        except EntryStoreError as exc:
            logger.warning("entry_cleanup_failed", extra={"error": str(exc)})
            return DeleteResult(error=f"cleanup failed: {exc}", deleted_count=0)
        logger.info(
            "entries_cleaned_up",
            extra={"user_id": user_id, "types": list(query.types), "deleted": removed},
        )
        return DeleteResult(deleted_count=removed)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def stats(self, user_id: Optional[str], *, detailed: bool = False) -> StatsResult:
        result = StatsResult()
        if not user_id:
            result.error = MSG_USER_ID_MISSING
            return result
        try:
            result.whole = self._repository.count(EntryQuery(user_id=user_id))
        except EntryStoreError as exc:
            result.error = f"failed getting stats/whole count: {exc}"
            return result
        if not detailed:
            return result

        per_type = (
            ("bookmarks", EntryType.BOOKMARK.value),
            ("pim", EntryType.PIM.value),
            ("org", EntryType.ORG.value),
        )
        for attribute, entry_type in per_type:
            query = EntryQuery(user_id=user_id, types=(entry_type,))
            try:
                setattr(result, attribute, self._repository.count(query))
            except EntryStoreError as exc:
                result.error = f"failed getting stats/{entry_type} count: {exc}"
                return result
        return result

    def search(
        self,
        user_id: Optional[str],
        *,
        types: Optional[Iterable[str]] = None,
        content: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
        priority: Optional[str] = None,
    ) -> SearchResult:
        """Return matching entries in store order (no sorting is applied)."""

        if not user_id:
            return SearchResult(error=MSG_USER_ID_MISSING)
        query = build_search_query(
            user_id,
            types=types,
            content=content,
            tags=tags,
            priority=priority,
            default_types=self._default_types,
        )
        try:
            entries = self._repository.find_all(query)
        except EntryNotFoundError:
            return SearchResult()
        except EntryStoreError as exc:
            logger.warning("entry_search_failed", extra={"error": str(exc)})
            return SearchResult(error=f"store error: {exc}")
        return SearchResult(count=len(entries), entries=entries)
