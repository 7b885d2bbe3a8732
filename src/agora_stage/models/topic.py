"""Models for topics and their solved-state audit trail."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, SmallInteger, Text
from sqlalchemy.orm import Mapped, mapped_column

from agora_stage.db.session import Base
from agora_stage.db.time import utcnow

TOPIC_KIND_QUESTION = "question"
TOPIC_KIND_NOTE = "note"
TOPIC_KINDS = (TOPIC_KIND_QUESTION, TOPIC_KIND_NOTE)

TOPIC_EVENT_SOLVE = "solve"
TOPIC_EVENT_UNSOLVE = "unsolve"


class Topic(Base):
    """Thread of posts opened by its owner's first post."""

    __tablename__ = "topic"

    tid: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    cid: Mapped[int] = mapped_column(Integer, ForeignKey("category.cid"), nullable=False)
    owner_uid: Mapped[int] = mapped_column(Integer, ForeignKey("user.uid"), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(Text, nullable=False)
    # Only question topics track the solved flag.
    kind: Mapped[str] = mapped_column(Text, nullable=False, default=TOPIC_KIND_NOTE)
    # 0 = unsolved, 1 = solved.
    solved: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)
    main_pid: Mapped[int | None] = mapped_column(Integer, nullable=True)
    post_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    last_post_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class TopicEvent(Base):
    """Append-only record of a real solved-state transition."""

    __tablename__ = "topic_event"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tid: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("topic.tid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[str] = mapped_column(Text, nullable=False)
    uid: Mapped[int] = mapped_column(Integer, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
