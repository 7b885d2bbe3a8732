"""Topic-related endpoints for the Agora API."""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Body, Query, status

from agora_stage.api.v1.dependencies import ActorDep, SessionDep, ViewerDep
from agora_stage.schemas.common import ERROR_RESPONSES
from agora_stage.schemas.post import PostResponse, ReplyCreate
from agora_stage.schemas.topic import (
    SolveResponse,
    TopicCreate,
    TopicCreateResponse,
    TopicEventResponse,
    TopicListResponse,
    TopicPageResponse,
)
from agora_stage.services import listing, solved
from agora_stage.services import posts as post_service
from agora_stage.services.solved import serialize_event

router = APIRouter(prefix="/topics", tags=["topics"], responses=ERROR_RESPONSES)


@router.get("/", response_model=TopicListResponse)
async def list_topics(
    viewer: ViewerDep,
    db: SessionDep,
    cid: list[int] | None = Query(None, description="Restrict to these category ids"),
    sort: Literal["recent", "old", "create", "posts"] = Query("recent"),
    start: int = Query(0, ge=0),
    stop: int | None = Query(None, ge=0, description="Inclusive end offset"),
) -> dict[str, Any]:
    """List unsolved topics in the requested order.

    Solved topics are left out of browse listings for every caller.
    """
    return listing.get_sorted_topics(db, viewer, cids=cid, sort=sort, start=start, stop=stop)


@router.post("/", response_model=TopicCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_topic(payload: TopicCreate, actor: ActorDep, db: SessionDep) -> dict[str, Any]:
    """Open a topic with its first post.

    The response echoes the ``anonymous`` and ``modOnly`` flags that were stored
    on the main post.
    """
    topic, post = post_service.create_topic(
        db,
        actor,
        cid=payload.cid,
        title=payload.title,
        content=payload.content,
        kind=payload.kind,
        anonymous=payload.anonymous,
        mod_only=payload.mod_only,
    )
    view = post_service.present(db, actor, post)
    return {
        "tid": topic.tid,
        "cid": topic.cid,
        "title": topic.title,
        "slug": topic.slug,
        "kind": topic.kind,
        "solved": topic.solved,
        "isSolved": False,
        "postCount": topic.post_count,
        "timestamp": topic.created_at,
        "lastPostTime": topic.last_post_at,
        "pid": post.pid,
        "anonymous": post.anonymous,
        "modOnly": post.mod_only,
        "post": view,
    }


def _batch_tids(payload: Any) -> Any:
    # Anything but {"tids": [...]} is left for the tid check to reject.
    return payload.get("tids") if isinstance(payload, dict) else None


@router.post("/solve", response_model=list[SolveResponse])
async def solve_topics(
    actor: ActorDep,
    db: SessionDep,
    payload: Any = Body(None),
) -> list[dict[str, Any]]:
    """Mark every topic in ``tids`` as solved, or none of them."""
    return [result.to_dict() for result in solved.solve_many(db, _batch_tids(payload), actor)]


@router.post("/unsolve", response_model=list[SolveResponse])
async def unsolve_topics(
    actor: ActorDep,
    db: SessionDep,
    payload: Any = Body(None),
) -> list[dict[str, Any]]:
    """Mark every topic in ``tids`` as unsolved, or none of them."""
    return [result.to_dict() for result in solved.unsolve_many(db, _batch_tids(payload), actor)]


@router.get("/{tid}", response_model=TopicPageResponse)
async def get_topic(tid: int, viewer: ViewerDep, db: SessionDep) -> dict[str, Any]:
    """Get a topic with the posts the caller may read."""
    return listing.get_topic_page(db, tid, viewer)


@router.post("/{tid}", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def reply_to_topic(
    tid: int,
    payload: ReplyCreate,
    actor: ActorDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Reply to a topic; the response echoes ``anonymous`` and ``modOnly``."""
    post = post_service.reply(
        db,
        actor,
        tid=tid,
        content=payload.content,
        anonymous=payload.anonymous,
        mod_only=payload.mod_only,
    )
    return post_service.present(db, actor, post)


@router.get("/{tid}/events", response_model=list[TopicEventResponse])
async def get_topic_events(tid: int, db: SessionDep) -> list[dict[str, Any]]:
    """Return the solve/unsolve history of a topic."""
    return [serialize_event(event) for event in solved.list_events(db, tid)]


@router.put("/{tid}/solved", response_model=SolveResponse)
async def solve_topic(tid: int, actor: ActorDep, db: SessionDep) -> dict[str, Any]:
    """Mark a question topic as solved."""
    return solved.solve(db, tid, actor).to_dict()


@router.delete("/{tid}/solved", response_model=SolveResponse)
async def unsolve_topic(tid: int, actor: ActorDep, db: SessionDep) -> dict[str, Any]:
    """Mark a question topic as unsolved."""
    return solved.unsolve(db, tid, actor).to_dict()
