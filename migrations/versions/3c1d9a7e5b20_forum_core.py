"""forum core tables

Revision ID: 3c1d9a7e5b20
Revises:
Create Date: 2026-10-19 09:12:44.518203

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c1d9a7e5b20"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, categories, topics, posts and the solved audit trail."""
    op.create_table(
        "user",
        sa.Column("uid", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.Text(), nullable=False),
        sa.Column("signature", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("uid"),
        sa.UniqueConstraint("username"),
    )
    op.create_table(
        "group_membership",
        sa.Column("group_name", sa.Text(), nullable=False),
        sa.Column("uid", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["uid"], ["user.uid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("group_name", "uid"),
    )
    op.create_table(
        "category",
        sa.Column("cid", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("parent_cid", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["parent_cid"], ["category.cid"]),
        sa.PrimaryKeyConstraint("cid"),
    )
    op.create_table(
        "category_moderator",
        sa.Column("cid", sa.Integer(), nullable=False),
        sa.Column("uid", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["cid"], ["category.cid"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["uid"], ["user.uid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("cid", "uid"),
    )
    op.create_table(
        "topic",
        sa.Column("tid", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("cid", sa.Integer(), nullable=False),
        sa.Column("owner_uid", sa.Integer(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("slug", sa.Text(), nullable=False),
        sa.Column("kind", sa.Text(), nullable=False),
        sa.Column("solved", sa.SmallInteger(), nullable=False),
        sa.Column("main_pid", sa.Integer(), nullable=True),
        sa.Column("post_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_post_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["cid"], ["category.cid"]),
        sa.ForeignKeyConstraint(["owner_uid"], ["user.uid"]),
        sa.PrimaryKeyConstraint("tid"),
    )
    op.create_table(
        "topic_event",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("tid", sa.Integer(), nullable=False),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("uid", sa.Integer(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["tid"], ["topic.tid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_topic_event_tid"), "topic_event", ["tid"], unique=False)
    op.create_table(
        "post",
        sa.Column("pid", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("tid", sa.Integer(), nullable=False),
        sa.Column("cid", sa.Integer(), nullable=False),
        sa.Column("author_uid", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("anonymous", sa.Boolean(), nullable=False),
        sa.Column("mod_only", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("edited_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("editor_uid", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["author_uid"], ["user.uid"]),
        sa.ForeignKeyConstraint(["cid"], ["category.cid"]),
        sa.ForeignKeyConstraint(["tid"], ["topic.tid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("pid"),
    )
    op.create_index(op.f("ix_post_tid"), "post", ["tid"], unique=False)


def downgrade() -> None:
    """Drop every forum table."""
    op.drop_index(op.f("ix_post_tid"), table_name="post")
    op.drop_table("post")
    op.drop_index(op.f("ix_topic_event_tid"), table_name="topic_event")
    op.drop_table("topic_event")
    op.drop_table("topic")
    op.drop_table("category_moderator")
    op.drop_table("category")
    op.drop_table("group_membership")
    op.drop_table("user")
