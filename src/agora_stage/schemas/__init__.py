# src/agora_stage/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import ERROR_RESPONSES, ErrorResponse
from .post import (
    PostEdit,
    PostIds,
    PostPrivilegesResponse,
    PostResponse,
    PostSummaryResponse,
    ReplyCreate,
)
from .topic import (
    SolveResponse,
    TopicCreate,
    TopicCreateResponse,
    TopicListResponse,
    TopicPageResponse,
)

__all__ = [
    "ERROR_RESPONSES",
    "ErrorResponse",
    "PostEdit", "PostIds", "PostPrivilegesResponse", "PostResponse", "PostSummaryResponse",
    "ReplyCreate",
    "SolveResponse", "TopicCreate", "TopicCreateResponse", "TopicListResponse",
    "TopicPageResponse",
]
