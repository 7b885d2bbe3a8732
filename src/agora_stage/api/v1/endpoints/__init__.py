"""API endpoint modules for version 1."""

from .posts import router as posts_router
from .topics import router as topics_router

__all__ = [
    "posts_router",
    "topics_router",
]
