"""Entry store domain package."""

from .errors import (
    DomainError,
    DuplicateEntryError,
    EntryNotFoundError,
    EntryStoreError,
    FatalError,
    TimestampFormatError,
)
from .gateway import (
    BULK_DELETE_THRESHOLD,
    DeleteResult,
    EntryStoreGateway,
    MessageResult,
    SearchResult,
    StatsResult,
)
from .models import DEFAULT_ENTRY_TYPES, Entry, EntryMetadata, EntryPatch, EntryType
from .repository import (
    EntryRepository,
    InMemoryEntryRepository,
    SqlEntryRepository,
    build_entry_repository,
)

__all__ = [
    "BULK_DELETE_THRESHOLD",
    "DEFAULT_ENTRY_TYPES",
    "DeleteResult",
    "DomainError",
    "DuplicateEntryError",
    "Entry",
    "EntryMetadata",
    "EntryNotFoundError",
    "EntryPatch",
    "EntryRepository",
    "EntryStoreError",
    "EntryStoreGateway",
    "EntryType",
    "FatalError",
    "InMemoryEntryRepository",
    "MessageResult",
    "SearchResult",
    "SqlEntryRepository",
    "StatsResult",
    "TimestampFormatError",
    "build_entry_repository",
]
