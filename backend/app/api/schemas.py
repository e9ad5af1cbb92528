"""Wire-level argument and result records for the entry RPC methods."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain.entrystore.gateway import (
    DeleteResult,
    MessageResult,
    SearchResult,
    StatsResult,
)
from ..domain.entrystore.models import Entry, EntryMetadata, EntryPatch


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class EntryMetadataPayload(WireModel):
    description: str = ""
    time_added_origin: str = Field(default="", alias="timeAddedOrigin")
    hash_origin: str = Field(default="", alias="hashOrigin")
    meta_origin: str = Field(default="", alias="metaOrigin")
    from_: str = Field(default="", alias="from")

    def to_domain(self) -> EntryMetadata:
        return EntryMetadata(
            description=self.description,
            time_added_origin=self.time_added_origin,
            hash_origin=self.hash_origin,
            meta_origin=self.meta_origin,
            from_=self.from_,
        )

    @classmethod
    def from_domain(cls, metadata: EntryMetadata) -> "EntryMetadataPayload":
        return cls(
            description=metadata.description,
            time_added_origin=metadata.time_added_origin,
            hash_origin=metadata.hash_origin,
            meta_origin=metadata.meta_origin,
            from_=metadata.from_,
        )


class UserScopedParams(WireModel):
    user_id: Optional[str] = Field(default=None, alias="userID")


class AddEntryParams(UserScopedParams):
    type: Optional[str] = None
    content: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    metadata: Optional[EntryMetadataPayload] = None
    scheduled: Optional[str] = None
    deadline: Optional[str] = None
    priority: Optional[str] = None
    todo_status: Optional[str] = Field(default=None, alias="todoStatus")


class UpdateEntryParams(UserScopedParams):
    uuid: Optional[str] = None
    type: Optional[str] = None
    content: Optional[str] = None
    tags: Optional[List[str]] = None
    scheduled: Optional[str] = None
    deadline: Optional[str] = None
    priority: Optional[str] = None
    todo_status: Optional[str] = Field(default=None, alias="todoStatus")

    def to_patch(self) -> EntryPatch:
        return EntryPatch(
            type=self.type,
            content=self.content,
            tags=self.tags,
            scheduled=self.scheduled,
            deadline=self.deadline,
            priority=self.priority,
            todo_status=self.todo_status,
        )


class DeleteEntryParams(UserScopedParams):
    uuids: List[str] = Field(default_factory=list)


class CleanupParams(UserScopedParams):
    types: List[str] = Field(default_factory=list)


class StatsParams(UserScopedParams):
    detailed: bool = False


class SearchEntryParams(UserScopedParams):
    types: List[str] = Field(default_factory=list)
    content: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    priority: Optional[str] = None


class EntryPayload(WireModel):
    uuid: str
    content: str
    type: str
    tags: List[str] = Field(default_factory=list)
    scheduled: Optional[datetime] = None
    deadline: Optional[datetime] = None
    added_at: datetime = Field(alias="addedAt")
    modified_at: datetime = Field(alias="modifiedAt")
    priority: Optional[str] = None
    todo_status: Optional[str] = Field(default=None, alias="todoStatus")
    metadata: Optional[EntryMetadataPayload] = None

    @classmethod
    def from_domain(cls, entry: Entry) -> "EntryPayload":
        return cls(
            uuid=entry.uuid,
            content=entry.content,
            type=entry.type,
            tags=list(entry.tags),
            scheduled=entry.scheduled,
            deadline=entry.deadline,
            added_at=entry.added_at,
            modified_at=entry.modified_at,
            priority=entry.priority,
            todo_status=entry.todo_status,
            metadata=(
                EntryMetadataPayload.from_domain(entry.metadata)
                if entry.metadata
                else None
            ),
        )


class MessageResponse(WireModel):
    message: str = ""

    @classmethod
    def from_result(cls, result: MessageResult) -> "MessageResponse":
        return cls(message=result.message)


class DeleteResponse(WireModel):
    error: str = ""
    deleted_count: int = Field(default=0, alias="deletedCount")

    @classmethod
    def from_result(cls, result: DeleteResult) -> "DeleteResponse":
        return cls(error=result.error, deleted_count=result.deleted_count)


class StatsResponse(WireModel):
    error: str = ""
    whole: int = -1
    bookmarks: int = -1
    pim: int = -1
    org: int = -1

    @classmethod
    def from_result(cls, result: StatsResult) -> "StatsResponse":
        return cls(
            error=result.error,
            whole=result.whole,
            bookmarks=result.bookmarks,
            pim=result.pim,
            org=result.org,
        )


class SearchResponse(WireModel):
    error: str = ""
    count: int = 0
    entries: List[EntryPayload] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: SearchResult) -> "SearchResponse":
        return cls(
            error=result.error,
            count=result.count,
            entries=[EntryPayload.from_domain(entry) for entry in result.entries],
        )
