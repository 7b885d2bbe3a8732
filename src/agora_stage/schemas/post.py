# src/agora_stage/schemas/post.py
"""Post-related Pydantic schemas."""

from datetime import datetime
from typing import Annotated

from pydantic import BeforeValidator, Field

from agora_stage.schemas.common import ApiModel, Flag, optional_flag


class ReplyCreate(ApiModel):
    """Schema for replying to a topic."""

    content: str = Field(..., min_length=1, max_length=32768, description="Post body")
    anonymous: Flag = Field(False, description="Hide the author from other members")
    mod_only: Flag = Field(False, description="Restrict the post to moderators")


class PostEdit(ApiModel):
    """Schema for editing a post. Leaving ``modOnly`` out keeps the stored flag."""

    content: str = Field(..., min_length=1, max_length=32768)
    mod_only: Annotated[bool | None, BeforeValidator(optional_flag)] = None


class PostIds(ApiModel):
    """Schema for batch privilege queries over post ids."""

    pids: list[int] = Field(..., description="Post ids in display order")
    privilege: str = Field("topics:read", description="Read privilege to check")


class UserBlock(ApiModel):
    """Author identity as shown to the viewer (possibly masked)."""

    uid: int
    username: str
    signature: str = ""


class PostResponse(ApiModel):
    """Schema for post information returned by the API."""

    pid: int
    tid: int
    cid: int
    uid: int
    content: str
    anonymous: bool
    mod_only: bool
    timestamp: datetime | None = None
    edited: datetime | None = None
    user: UserBlock
    self_post: bool
    is_admin_or_mod: bool


class TopicRef(ApiModel):
    tid: int
    title: str
    slug: str


class PostSummaryResponse(PostResponse):
    """Post summary with a reference to its topic."""

    topic: TopicRef


class RawResponse(ApiModel):
    pid: int
    content: str


class PostPrivilegesResponse(ApiModel):
    """Per-viewer privilege flags for a post."""

    read: bool
    topics_read: bool = Field(..., alias="topics:read")
    is_mod_only: bool
    is_admin_or_mod: bool
    posts_edit: bool = Field(..., alias="posts:edit")
    self_post: bool


class FilterResponse(ApiModel):
    pids: list[int]
