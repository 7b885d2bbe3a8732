# src/agora_stage/models/post.py
"""SQLAlchemy models for posts and related attributes."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from agora_stage.db.session import Base
from agora_stage.db.time import utcnow


class Post(Base):
    """A single message inside a topic.

    ``author_uid`` always holds the true creator. The ``anonymous`` and
    ``mod_only`` flags only change how and to whom the post is presented.
    """

    __tablename__ = "post"

    pid: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tid: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("topic.tid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Copied from the topic so visibility checks need no join.
    cid: Mapped[int] = mapped_column(Integer, ForeignKey("category.cid"), nullable=False)
    author_uid: Mapped[int] = mapped_column(Integer, ForeignKey("user.uid"), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)
    anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    mod_only: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    edited_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    editor_uid: Mapped[int | None] = mapped_column(Integer, nullable=True)
