"""Exception types separating soft domain failures from fatal ones."""

from __future__ import annotations

__all__ = [
    "DomainError",
    "DuplicateEntryError",
    "EntryNotFoundError",
    "EntryStoreError",
    "FatalError",
    "TimestampFormatError",
]


class DomainError(Exception):
    """Soft failure reported to callers through a result message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class FatalError(Exception):
    """Hard failure that aborts the operation and reaches the transport."""


class TimestampFormatError(FatalError, ValueError):
    """A scheduled/deadline value did not match the timestamp layout."""

    def __init__(self, field_name: str, value: str, layout: str) -> None:
        super().__init__(
            f"cannot parse {field_name} '{value}' with layout '{layout}'"
        )
        self.field_name = field_name
        self.value = value


class EntryNotFoundError(KeyError):
    """No entry matched the lookup."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "not found"


class EntryStoreError(RuntimeError):
    """The underlying store rejected or failed an operation."""


class DuplicateEntryError(EntryStoreError):
    """An insert violated the per-user content uniqueness constraint."""
