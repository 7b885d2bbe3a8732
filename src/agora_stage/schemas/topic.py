"""Topic-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from agora_stage.schemas.common import ApiModel, Flag
from agora_stage.schemas.post import PostResponse, UserBlock


class TopicCreate(ApiModel):
    """Schema for opening a new topic."""

    cid: int = Field(..., description="Category id")
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1, max_length=32768)
    kind: Literal["question", "note"] = Field("note", description="Topic type")
    anonymous: Flag = False
    mod_only: Flag = False


class TopicHeader(ApiModel):
    tid: int
    cid: int
    title: str
    slug: str
    kind: str
    solved: int
    is_solved: bool
    post_count: int
    timestamp: datetime | None = None
    last_post_time: datetime | None = None


class TopicCreateResponse(TopicHeader):
    """Created topic echoing the main post's flags."""

    pid: int
    anonymous: bool
    mod_only: bool
    post: PostResponse


class TopicPrivileges(ApiModel):
    topics_read: bool = Field(..., alias="topics:read")
    is_admin_or_mod: bool
    is_owner: bool
    can_solve: bool


class TopicPageResponse(TopicHeader):
    posts: list[PostResponse]
    privileges: TopicPrivileges


class Teaser(ApiModel):
    pid: int
    content: str
    mod_only: bool
    anonymous: bool
    timestamp: datetime | None = None
    user: UserBlock


class TopicListEntry(TopicHeader):
    teaser: Teaser | None = None


class TopicListResponse(ApiModel):
    topics: list[TopicListEntry]
    next_start: int


class TopicEventResponse(ApiModel):
    type: Literal["solve", "unsolve"]
    uid: int
    timestamp: datetime | None = None


class SolveResponse(ApiModel):
    """Result of a solve/unsolve call on one topic."""

    tid: int
    solved: int
    is_solved: bool
    events: list[TopicEventResponse] = Field(default_factory=list)
