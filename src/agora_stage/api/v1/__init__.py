# src/agora_stage/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import posts_router, topics_router

__all__ = [
    "posts_router",
    "topics_router",
]
