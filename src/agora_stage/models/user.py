"""SQLAlchemy models for forum accounts and group membership."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from agora_stage.db.session import Base

GUEST_UID = 0

ADMINISTRATORS_GROUP = "administrators"
GLOBAL_MODERATORS_GROUP = "Global Moderators"


class User(Base):
    """Registered account. The guest (uid 0) is never stored."""

    __tablename__ = "user"

    uid: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    # Rendered under each post; cleared from redacted views.
    signature: Mapped[str] = mapped_column(Text, nullable=False, default="")


class GroupMembership(Base):
    """Join table mapping users into named privilege groups."""

    __tablename__ = "group_membership"

    group_name: Mapped[str] = mapped_column(Text, primary_key=True)
    uid: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user.uid", ondelete="CASCADE"),
        primary_key=True,
    )
