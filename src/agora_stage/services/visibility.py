"""Visibility policy for mod-only posts.

A post flagged ``mod_only`` is readable only by administrators, global
moderators and moderators of the post's category. Ownership grants nothing
here: the author of a mod-only post who holds none of those roles cannot read
it either. Everything in this module is pure and works on already-loaded rows.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from agora_stage.core.errors import InvalidData
from agora_stage.core.settings import settings
from agora_stage.services.roles import RoleFacts

READ_PRIVILEGES = ("read", "topics:read")


class PostLike(Protocol):
    pid: int
    cid: int
    author_uid: int
    mod_only: bool


@dataclass(frozen=True)
class PostPrivileges:
    """Per-viewer privilege flags for one post."""

    read: bool
    topics_read: bool
    is_mod_only: bool
    is_admin_or_mod: bool
    edit: bool
    self_post: bool

    def to_dict(self) -> dict[str, bool]:
        """Return the flags under their wire names."""
        return {
            "read": self.read,
            "topics:read": self.topics_read,
            "isModOnly": self.is_mod_only,
            "isAdminOrMod": self.is_admin_or_mod,
            "posts:edit": self.edit,
            "selfPost": self.self_post,
        }


def can_view(post: PostLike, facts: RoleFacts) -> bool:
    """Return True when ``facts`` may read ``post``."""
    if not post.mod_only:
        return True
    return facts.is_admin_or_mod(post.cid)


def can_edit(post: PostLike, facts: RoleFacts) -> bool:
    """Return True when ``facts`` may change the content of ``post``."""
    if not can_view(post, facts):
        return False
    return facts.is_self(post.author_uid) or facts.is_admin_or_mod(post.cid)


def privilege_flags(post: PostLike, facts: RoleFacts) -> PostPrivileges:
    readable = can_view(post, facts)
    return PostPrivileges(
        read=readable,
        topics_read=readable,
        is_mod_only=bool(post.mod_only),
        is_admin_or_mod=facts.is_admin_or_mod(post.cid),
        edit=can_edit(post, facts),
        self_post=facts.is_self(post.author_uid),
    )


def filter_visible(posts: Iterable[PostLike], facts: RoleFacts) -> list[PostLike]:
    """Return the posts ``facts`` may read, preserving input order."""
    return [post for post in posts if can_view(post, facts)]


def filter_pids(
    privilege: str,
    pids: Sequence[int],
    posts_by_pid: Mapping[int, PostLike],
    facts: RoleFacts,
) -> list[int]:
    """Return the order-preserving subsequence of ``pids`` readable by ``facts``.

    Args:
        privilege: Privilege being checked; only read privileges are known.
        pids: Candidate post ids in display order.
        posts_by_pid: Loaded posts keyed by pid; ids missing here are dropped.
        facts: Viewer role facts.

    Raises:
        InvalidData: If ``privilege`` is not a read privilege.
    """
    if privilege not in READ_PRIVILEGES:
        raise InvalidData()
    visible: list[int] = []
    for pid in pids:
        post = posts_by_pid.get(pid)
        if post is not None and can_view(post, facts):
            visible.append(pid)
    return visible


def apply_visibility_redaction(
    post_view: Mapping[str, Any],
    privs: PostPrivileges | Mapping[str, Any],
) -> dict[str, Any]:
    """Return a copy of ``post_view`` with mod-only content hidden from non-moderators.

    The stored post is never touched: ``post_view`` is the presentation dict
    about to be returned to a client.
    """
    view = copy.deepcopy(dict(post_view))
    if isinstance(privs, PostPrivileges):
        is_admin_or_mod = privs.is_admin_or_mod
    else:
        is_admin_or_mod = bool(privs.get("isAdminOrMod"))

    if view.get("modOnly") and not is_admin_or_mod:
        view["content"] = settings.mod_only_placeholder
        user = view.get("user")
        if isinstance(user, dict):
            user["signature"] = ""
    return view
