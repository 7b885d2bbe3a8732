"""Post-related endpoints for the Agora API."""

from typing import Any

from fastapi import APIRouter, HTTPException, status

from agora_stage.api.v1.dependencies import ActorDep, SessionDep, ViewerDep
from agora_stage.schemas.common import ERROR_RESPONSES
from agora_stage.schemas.post import (
    FilterResponse,
    PostEdit,
    PostIds,
    PostPrivilegesResponse,
    PostResponse,
    PostSummaryResponse,
    RawResponse,
)
from agora_stage.services import posts as post_service

router = APIRouter(prefix="/posts", tags=["posts"], responses=ERROR_RESPONSES)


def _not_found() -> HTTPException:
    # Hidden and missing posts must look the same to the caller.
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")


@router.get("/{pid}", response_model=PostResponse)
async def get_post(pid: int, viewer: ViewerDep, db: SessionDep) -> dict[str, Any]:
    """Get a specific post by ID.

    Args:
        pid: ID of the post to retrieve
        viewer: Role facts of the caller (guest when unauthenticated)
        db: Database session

    Returns:
        The post as seen by the caller

    Raises:
        HTTPException: If the post does not exist or the caller may not read it
    """
    post = post_service.get_post(db, viewer, pid)
    if post is None:
        raise _not_found()
    return post


@router.get("/{pid}/summary", response_model=PostSummaryResponse)
async def get_post_summary(pid: int, viewer: ViewerDep, db: SessionDep) -> dict[str, Any]:
    """Get a post summary together with its topic reference."""
    summary = post_service.get_summary(db, viewer, pid)
    if summary is None:
        raise _not_found()
    return summary


@router.get("/{pid}/raw", response_model=RawResponse)
async def get_post_raw(pid: int, viewer: ViewerDep, db: SessionDep) -> dict[str, Any]:
    """Get the unrendered content of a post."""
    content = post_service.get_raw(db, viewer, pid)
    if content is None:
        raise _not_found()
    return {"pid": pid, "content": content}


@router.put("/{pid}", response_model=PostResponse)
async def edit_post(
    pid: int,
    payload: PostEdit,
    actor: ActorDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Edit a post's content and, for moderators, its mod-only flag.

    Raises:
        ForumError: ``no-post`` if missing, ``no-privileges`` if the caller may
            not edit the post or change its flag
    """
    post_service.edit_post(db, actor, pid=pid, content=payload.content, mod_only=payload.mod_only)
    post = post_service.get_post(db, actor, pid)
    if post is None:
        raise _not_found()
    return post


@router.post("/privileges", response_model=list[PostPrivilegesResponse])
async def get_post_privileges(
    payload: PostIds,
    viewer: ViewerDep,
    db: SessionDep,
) -> list[dict[str, bool]]:
    """Return privilege flags for each pid, positional to the request."""
    return [flags.to_dict() for flags in post_service.get_privileges(db, viewer, payload.pids)]


@router.post("/filter", response_model=FilterResponse)
async def filter_posts(payload: PostIds, viewer: ViewerDep, db: SessionDep) -> dict[str, list[int]]:
    """Return the pids the caller may read, in request order."""
    return {"pids": post_service.filter_pids(db, viewer, payload.pids, payload.privilege)}
