"""Create memos, tags and memo_tags tables

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Initial schema. Memos are soft-deleted through deleted_at; tags are
       unique by name and linked to memos through memo_tags.
How:   Portable column types only, so the same revision runs on SQLite and
       PostgreSQL. Timestamps are stored in UTC.

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "memos",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        # NULL while live, set when moved to the trash
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_memos_created_at", "memos", ["created_at"])
    op.create_index("idx_memos_deleted_at", "memos", ["deleted_at"])

    op.create_table(
        "tags",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "memo_tags",
        sa.Column("memo_id", sa.Integer(), nullable=False),
        sa.Column("tag_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["memo_id"], ["memos.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tag_id"], ["tags.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("memo_id", "tag_id"),
    )
    op.create_index("idx_memo_tags_tag_id", "memo_tags", ["tag_id"])


def downgrade() -> None:
    """Drop every table. All memos and tags are lost."""
    op.drop_index("idx_memo_tags_tag_id", table_name="memo_tags")
    op.drop_table("memo_tags")
    op.drop_table("tags")
    op.drop_index("idx_memos_deleted_at", table_name="memos")
    op.drop_index("idx_memos_created_at", table_name="memos")
    op.drop_table("memos")
