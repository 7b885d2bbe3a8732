"""Topic thread views and sorted browse listings."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from agora_stage.core.errors import InvalidData, NoTopic
from agora_stage.core.settings import settings
from agora_stage.models import Post, Topic, User
from agora_stage.models.topic import TOPIC_KIND_QUESTION
from agora_stage.services import visibility
from agora_stage.services.posts import build_post_view
from agora_stage.services.roles import RoleFacts
from agora_stage.services.solved import SolvedState, can_solve

logger = logging.getLogger(__name__)

SORTS = ("recent", "old", "create", "posts")


def _topic_header(topic: Topic) -> dict[str, Any]:
    return {
        "tid": topic.tid,
        "cid": topic.cid,
        "title": topic.title,
        "slug": topic.slug,
        "kind": topic.kind,
        "solved": topic.solved,
        "isSolved": topic.solved == SolvedState.SOLVED,
        "postCount": topic.post_count,
        "timestamp": topic.created_at,
        "lastPostTime": topic.last_post_at,
    }


def _load_authors(db: Session, posts: Sequence[Post]) -> dict[int, User]:
    uids = {post.author_uid for post in posts}
    if not uids:
        return {}
    return {user.uid: user for user in db.scalars(select(User).where(User.uid.in_(uids)))}


def get_topic_page(db: Session, tid: int, facts: RoleFacts) -> dict[str, Any]:
    """Return topic ``tid`` with the posts ``facts`` may read.

    Mod-only posts are dropped for viewers without a moderation role, and
    every remaining post carries ``anonymous``, ``selfPost`` and
    ``isAdminOrMod`` for this viewer.

    Raises:
        NoTopic: If the topic does not exist.
    """
    topic = db.get(Topic, tid)
    if topic is None:
        raise NoTopic(tid=tid)

    posts = list(db.scalars(select(Post).where(Post.tid == tid).order_by(Post.pid)))
    visible = visibility.filter_visible(posts, facts)
    authors = _load_authors(db, visible)

    page = _topic_header(topic)
    page["posts"] = [build_post_view(post, authors.get(post.author_uid), facts) for post in visible]
    page["privileges"] = {
        "topics:read": True,
        "isAdminOrMod": facts.is_admin_or_mod(topic.cid),
        "isOwner": facts.is_self(topic.owner_uid),
        "canSolve": topic.kind == TOPIC_KIND_QUESTION and can_solve(topic, facts),
    }
    return page


def _apply_sort(stmt: Select[tuple[Topic]], sort: str) -> Select[tuple[Topic]]:
    if sort == "recent":
        return stmt.order_by(Topic.last_post_at.desc(), Topic.tid.desc())
    if sort == "old":
        return stmt.order_by(Topic.last_post_at.asc(), Topic.tid.asc())
    if sort == "create":
        return stmt.order_by(Topic.created_at.desc(), Topic.tid.desc())
    if sort == "posts":
        return stmt.order_by(Topic.post_count.desc(), Topic.tid.desc())
    raise InvalidData()


def _teaser(db: Session, topic: Topic, facts: RoleFacts) -> dict[str, Any] | None:
    post = db.scalars(
        select(Post).where(Post.tid == topic.tid).order_by(Post.pid.desc()).limit(1)
    ).first()
    if post is None:
        return None
    view = build_post_view(post, db.get(User, post.author_uid), facts)
    return {
        "pid": view["pid"],
        "content": view["content"],
        "modOnly": view["modOnly"],
        "anonymous": view["anonymous"],
        "timestamp": view["timestamp"],
        "user": view["user"],
    }


def get_sorted_topics(
    db: Session,
    facts: RoleFacts,
    *,
    cids: Sequence[int] | None = None,
    sort: str = "recent",
    start: int = 0,
    stop: int | None = None,
) -> dict[str, Any]:
    """Return a page of unsolved topics for browsing.

    Solved topics never appear here, whoever is asking. ``start`` and ``stop``
    are inclusive offsets into the sorted result.

    Raises:
        InvalidData: If ``sort`` is unknown or the range is empty.
    """
    if stop is None:
        stop = start + settings.topics_per_page - 1
    if start < 0 or stop < start:
        raise InvalidData()

    stmt = select(Topic).where(Topic.solved == int(SolvedState.UNSOLVED))
    if cids:
        stmt = stmt.where(Topic.cid.in_(list(cids)))
    stmt = _apply_sort(stmt, sort).offset(start).limit(stop - start + 1)

    topics = list(db.scalars(stmt))
    logger.debug("Listing %d topics (sort=%s, cids=%s)", len(topics), sort, cids)

    entries = []
    for topic in topics:
        entry = _topic_header(topic)
        entry["teaser"] = _teaser(db, topic, facts)
        entries.append(entry)
    return {"topics": entries, "nextStart": stop + 1}
