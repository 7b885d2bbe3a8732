"""Authorship helpers for anonymous posts.

The true author is always stored. Anonymity only affects which identity a
given viewer is shown, and that decision hangs on two per-viewer flags:
``selfPost`` and ``isAdminOrMod``.
"""

from __future__ import annotations

from typing import Any

from agora_stage.core.settings import settings
from agora_stage.models.user import GUEST_UID
from agora_stage.services.roles import RoleFacts
from agora_stage.services.visibility import PostLike

_TRUE_STRINGS = frozenset({"true", "1", "on", "yes"})
_FALSE_STRINGS = frozenset({"false", "0", "off", "no", ""})


def normalize_flag(value: Any) -> bool:
    """Coerce a client or storage flag into a strict bool.

    Accepts booleans, ``None``, integers and the usual string spellings
    (``"true"``/``"false"``, ``"1"``/``"0"``, ``"on"``/``"off"``). Missing and
    empty values are False.

    Raises:
        ValueError: If ``value`` is a string or type with no boolean reading.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ValueError(f"Cannot interpret {value!r} as a boolean flag")


def is_owner(post: PostLike, uid: int) -> bool:
    """Return True only for the true author of ``post``."""
    return uid > GUEST_UID and post.author_uid == uid


def viewer_flags(post: PostLike, facts: RoleFacts) -> dict[str, bool]:
    """Return the display flags attached to ``post`` for this viewer."""
    return {
        "selfPost": facts.is_self(post.author_uid),
        "isAdminOrMod": facts.is_admin_or_mod(post.cid),
    }


def display_author(
    post: Any,
    author: dict[str, Any],
    *,
    self_post: bool,
    is_admin_or_mod: bool,
) -> dict[str, Any]:
    """Pick the author block shown next to ``post``.

    Anonymous posts reveal their author only to the author and to
    administrators/moderators; everybody else gets a placeholder identity.
    """
    if not post.anonymous or self_post or is_admin_or_mod:
        return dict(author)
    return {
        "uid": GUEST_UID,
        "username": settings.anonymous_display_name,
        "signature": "",
    }
