# src/agora_stage/models/__init__.py
"""SQLAlchemy models for the Agora application."""

from .category import Category, CategoryModerator
from .post import Post
from .topic import Topic, TopicEvent
from .user import GroupMembership, User

__all__ = [
    "Category", "CategoryModerator",
    "Post",
    "Topic", "TopicEvent",
    "GroupMembership", "User",
]
