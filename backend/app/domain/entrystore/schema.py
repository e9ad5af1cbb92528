"""SQLAlchemy table definition for persisted entries."""

from __future__ import annotations

import sqlalchemy as sa

__all__ = ["ENTRIES_TABLE_NAME", "build_entries_table"]

ENTRIES_TABLE_NAME = "entries"


def build_entries_table(metadata: sa.MetaData) -> sa.Table:
    """Attach the ``entries`` table to ``metadata``.

    All users share the table; ``user_id`` partitions it and every index
    leads with it.
    """

    return sa.Table(
        ENTRIES_TABLE_NAME,
        metadata,
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False, default=list),
        sa.Column("scheduled", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("added_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("modified_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("priority", sa.Text(), nullable=True),
        sa.Column("todo_status", sa.String(length=64), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.UniqueConstraint("user_id", "uuid", name="uq_entries_user_uuid"),
        sa.UniqueConstraint("user_id", "content", name="uq_entries_user_content"),
        sa.Index("ix_entries_user_type", "user_id", "type"),
    )
