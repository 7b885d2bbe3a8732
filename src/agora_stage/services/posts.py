"""Service-level helpers for creating, reading and editing posts."""
from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from agora_stage.core.errors import NoCategory, NoPost, NoPrivileges, NoTopic, NotLoggedIn
from agora_stage.db.time import utcnow
from agora_stage.models import Category, Post, Topic, User
from agora_stage.models.topic import TOPIC_KIND_NOTE
from agora_stage.services import authorship, visibility
from agora_stage.services.authorship import display_author, viewer_flags
from agora_stage.services.roles import RoleFacts
from agora_stage.services.visibility import PostPrivileges

logger = logging.getLogger(__name__)

_SLUG_STRIP = re.compile(r"[^\w\s-]")
_SLUG_DASH = re.compile(r"[\s_-]+")


def slugify(title: str) -> str:
    """Return a URL-friendly fragment for ``title``."""
    cleaned = _SLUG_STRIP.sub("", title.lower()).strip()
    return _SLUG_DASH.sub("-", cleaned).strip("-") or "topic"


def _author_block(author: User | None) -> dict[str, Any]:
    if author is None:
        return {"uid": 0, "username": "[[global:former-user]]", "signature": ""}
    return {"uid": author.uid, "username": author.username, "signature": author.signature}


def build_post_view(post: Post, author: User | None, facts: RoleFacts) -> dict[str, Any]:
    """Shape ``post`` for ``facts``: per-viewer flags, masked author, redaction."""
    flags = viewer_flags(post, facts)
    user = display_author(
        post,
        _author_block(author),
        self_post=flags["selfPost"],
        is_admin_or_mod=flags["isAdminOrMod"],
    )
    view = {
        "pid": post.pid,
        "tid": post.tid,
        "cid": post.cid,
        "uid": user["uid"],
        "content": post.content,
        "anonymous": bool(post.anonymous),
        "modOnly": bool(post.mod_only),
        "timestamp": post.created_at,
        "edited": post.edited_at,
        "user": user,
        **flags,
    }
    return visibility.apply_visibility_redaction(view, flags)


def _require_user(facts: RoleFacts) -> None:
    if facts.is_guest:
        raise NotLoggedIn()


def create_topic(
    db: Session,
    facts: RoleFacts,
    *,
    cid: int,
    title: str,
    content: str,
    kind: str = TOPIC_KIND_NOTE,
    anonymous: bool = False,
    mod_only: bool = False,
) -> tuple[Topic, Post]:
    """Open a topic in ``cid`` with its main post.

    Returns:
        The new topic and its first post. ``post.author_uid`` is the caller
        whatever ``anonymous`` says.

    Raises:
        NotLoggedIn: If the caller is a guest.
        NoCategory: If ``cid`` does not exist.
    """
    _require_user(facts)
    if db.get(Category, cid) is None:
        raise NoCategory()

    now = utcnow()
    topic = Topic(
        cid=cid,
        owner_uid=facts.uid,
        title=title,
        slug=slugify(title),
        kind=kind,
        solved=0,
        post_count=1,
        created_at=now,
        last_post_at=now,
    )
    db.add(topic)
    db.flush()
    topic.slug = f"{topic.tid}/{slugify(title)}"

    post = Post(
        tid=topic.tid,
        cid=cid,
        author_uid=facts.uid,
        content=content,
        anonymous=anonymous,
        mod_only=mod_only,
        created_at=now,
    )
    db.add(post)
    db.flush()
    topic.main_pid = post.pid
    db.commit()
    db.refresh(topic)
    db.refresh(post)
    return topic, post


def reply(
    db: Session,
    facts: RoleFacts,
    *,
    tid: int,
    content: str,
    anonymous: bool = False,
    mod_only: bool = False,
) -> Post:
    """Append a reply to ``tid``.

    Raises:
        NotLoggedIn: If the caller is a guest.
        NoTopic: If the topic does not exist.
    """
    _require_user(facts)
    topic = db.get(Topic, tid)
    if topic is None:
        raise NoTopic(tid=tid)

    now = utcnow()
    post = Post(
        tid=tid,
        cid=topic.cid,
        author_uid=facts.uid,
        content=content,
        anonymous=anonymous,
        mod_only=mod_only,
        created_at=now,
    )
    db.add(post)
    topic.post_count += 1
    topic.last_post_at = now
    db.commit()
    db.refresh(post)
    return post


def _load_visible(db: Session, facts: RoleFacts, pid: int) -> Post | None:
    post = db.get(Post, pid)
    if post is None or not visibility.can_view(post, facts):
        return None
    return post


def present(db: Session, facts: RoleFacts, post: Post) -> dict[str, Any]:
    """Shape an already-authorised ``post`` for ``facts``.

    Creation echoes go through here without the read gate, so a member who
    writes a mod-only post gets its flags back with the content redacted.
    """
    return build_post_view(post, db.get(User, post.author_uid), facts)


def get_post(db: Session, facts: RoleFacts, pid: int) -> dict[str, Any] | None:
    """Return the post as seen by ``facts``, or None if missing or not viewable."""
    post = _load_visible(db, facts, pid)
    if post is None:
        return None
    return present(db, facts, post)


def get_summary(db: Session, facts: RoleFacts, pid: int) -> dict[str, Any] | None:
    """Return a post summary with its topic header, gated like :func:`get_post`."""
    post = _load_visible(db, facts, pid)
    if post is None:
        return None
    view = present(db, facts, post)
    topic = db.get(Topic, post.tid)
    view["topic"] = {
        "tid": post.tid,
        "title": topic.title if topic else "",
        "slug": topic.slug if topic else "",
    }
    return view


def get_raw(db: Session, facts: RoleFacts, pid: int) -> str | None:
    """Return the stored content of the post, gated like :func:`get_post`."""
    post = _load_visible(db, facts, pid)
    return post.content if post is not None else None


def is_owner(db: Session, pid: int, uid: int) -> bool:
    """Return True when ``uid`` authored post ``pid``."""
    post = db.get(Post, pid)
    return post is not None and authorship.is_owner(post, uid)


def edit_post(
    db: Session,
    facts: RoleFacts,
    *,
    pid: int,
    content: str,
    mod_only: bool | None = None,
) -> Post:
    """Replace the content of ``pid`` and optionally its mod-only flag.

    Authors may edit their own content. Only administrators and moderators of
    the post's category may change ``mod_only``; if anybody else tries, the
    whole edit is rejected and nothing is written.

    Raises:
        NotLoggedIn: If the caller is a guest.
        NoPost: If the post does not exist.
        NoPrivileges: If the caller may not edit the post or its flag.
    """
    _require_user(facts)
    post = db.get(Post, pid)
    if post is None:
        raise NoPost(pid=pid)
    if not visibility.can_edit(post, facts):
        logger.warning("uid %s denied edit of post %s", facts.uid, pid)
        raise NoPrivileges(pid=pid)

    toggles = mod_only is not None and mod_only != post.mod_only
    if toggles and not facts.is_admin_or_mod(post.cid):
        logger.warning("uid %s denied mod-only change on post %s", facts.uid, pid)
        raise NoPrivileges(pid=pid)

    post.content = content
    if toggles:
        post.mod_only = bool(mod_only)
        logger.info("uid %s set mod_only=%s on post %s", facts.uid, post.mod_only, pid)
    post.edited_at = utcnow()
    post.editor_uid = facts.uid
    db.commit()
    db.refresh(post)
    return post


def _load_posts(db: Session, pids: Sequence[int]) -> dict[int, Post]:
    if not pids:
        return {}
    return {post.pid: post for post in db.scalars(select(Post).where(Post.pid.in_(set(pids))))}


def filter_pids(
    db: Session,
    facts: RoleFacts,
    pids: Sequence[int],
    privilege: str = "topics:read",
) -> list[int]:
    """Return the ids in ``pids`` that ``facts`` may read, in input order."""
    return visibility.filter_pids(privilege, pids, _load_posts(db, pids), facts)


def get_privileges(db: Session, facts: RoleFacts, pids: Sequence[int]) -> list[PostPrivileges]:
    """Return privilege flags positional to ``pids``; unknown ids get no rights."""
    posts = _load_posts(db, pids)
    flags: list[PostPrivileges] = []
    for pid in pids:
        post = posts.get(pid)
        if post is None:
            flags.append(
                PostPrivileges(
                    read=False,
                    topics_read=False,
                    is_mod_only=False,
                    is_admin_or_mod=facts.is_admin_or_global_mod(),
                    edit=False,
                    self_post=False,
                )
            )
        else:
            flags.append(visibility.privilege_flags(post, facts))
    return flags
