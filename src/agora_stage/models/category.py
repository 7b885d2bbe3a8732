"""SQLAlchemy models for categories and their moderators."""
from sqlalchemy import ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from agora_stage.db.session import Base


class Category(Base):
    """Category metadata used for grouping topics and scoping moderation."""

    __tablename__ = "category"

    cid: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Top-level categories have parent_cid = NULL.
    parent_cid: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("category.cid"),
        nullable=True,
    )


class CategoryModerator(Base):
    """Join table granting a user moderation rights within one category."""

    __tablename__ = "category_moderator"

    cid: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("category.cid", ondelete="CASCADE"),
        primary_key=True,
    )
    uid: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user.uid", ondelete="CASCADE"),
        primary_key=True,
    )
