# src/agora_stage/services/__init__.py
"""Business logic services for the Agora application."""

from . import authorship, listing, posts, roles, solved, visibility

__all__ = [
    "authorship",
    "listing",
    "posts",
    "roles",
    "solved",
    "visibility",
]
