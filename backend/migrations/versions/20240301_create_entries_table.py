"""Create the shared entries table.

Revision ID: 20240301_create_entries
Revises:
Create Date: 2024-03-01
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20240301_create_entries"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column(
            "tags",
            sa.JSON(),
            nullable=False,
            server_default=sa.text("'[]'"),
        ),
        sa.Column("scheduled", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "added_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "modified_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("priority", sa.Text(), nullable=True),
        sa.Column("todo_status", sa.String(length=64), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.UniqueConstraint("user_id", "uuid", name="uq_entries_user_uuid"),
        sa.UniqueConstraint("user_id", "content", name="uq_entries_user_content"),
    )
    op.create_index("ix_entries_user_type", "entries", ["user_id", "type"])


def downgrade() -> None:
    op.drop_index("ix_entries_user_type", table_name="entries")
    op.drop_table("entries")
