"""Validation and normalization rules applied to entry input."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from .errors import DomainError, TimestampFormatError
from .models import DEFAULT_ENTRY_TYPES

__all__ = [
    "DATETIME_LAYOUT",
    "MSG_EMPTY_CONTENT",
    "MSG_MALFORMED_PRIORITY",
    "MSG_TYPE_MISSING",
    "MSG_UNKNOWN_TYPE",
    "MSG_USER_ID_MISSING",
    "PRIORITY_PATTERN",
    "normalize_tags",
    "normalize_todo_status",
    "parse_timestamp",
    "require_content",
    "require_entry_type",
    "require_user_id",
    "validate_priority",
]

DATETIME_LAYOUT = "%Y-%m-%dT%H:%M:%S.%fZ"
# Compiled at import; a broken pattern fails the process at startup.
PRIORITY_PATTERN = re.compile(r"#[A-Z]\Z")

MSG_USER_ID_MISSING = "User ID is missing"
MSG_TYPE_MISSING = "Entry type is missing"
MSG_UNKNOWN_TYPE = "Unknown entry type"
MSG_EMPTY_CONTENT = "Empty content not allowed"
MSG_MALFORMED_PRIORITY = "Malformed priority value"


def require_user_id(user_id: Optional[str]) -> str:
    if not user_id:
        raise DomainError(MSG_USER_ID_MISSING)
    return user_id


def require_entry_type(
    entry_type: Optional[str], known_types: Iterable[str] = DEFAULT_ENTRY_TYPES
) -> str:
    if not entry_type:
        raise DomainError(MSG_TYPE_MISSING)
    if entry_type not in tuple(known_types):
        raise DomainError(MSG_UNKNOWN_TYPE)
    return entry_type


def require_content(content: Optional[str]) -> str:
    if not content:
        raise DomainError(MSG_EMPTY_CONTENT)
    return content


def validate_priority(priority: str) -> str:
    """Accept priorities ending in ``#`` plus one uppercase letter (``#A``).

    ``search`` is used rather than a full match; ``x#B`` is accepted.
    """

    if not PRIORITY_PATTERN.search(priority):
        raise DomainError(MSG_MALFORMED_PRIORITY)
    return priority


def normalize_tags(tags: Optional[Iterable[str]]) -> List[str]:
    return [tag.lower() for tag in tags or ()]


def normalize_todo_status(todo_status: str) -> str:
    return todo_status.upper()


def parse_timestamp(value: str, *, field_name: str) -> datetime:
    """Parse ``value`` with the fixed layout; failures are fatal."""

    try:
        parsed = datetime.strptime(value, DATETIME_LAYOUT)
    except ValueError as exc:
        raise TimestampFormatError(field_name, value, DATETIME_LAYOUT) from exc
    return parsed.replace(tzinfo=timezone.utc)
