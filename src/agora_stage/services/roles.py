"""Identity and role facts for the viewer of a request.

Role membership is resolved once per request into an immutable ``RoleFacts``
value and handed to every policy function, so the policies themselves never
touch the database.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.orm import Session

from agora_stage.core.settings import settings
from agora_stage.models import Category, CategoryModerator, GroupMembership
from agora_stage.models.user import (
    ADMINISTRATORS_GROUP,
    GLOBAL_MODERATORS_GROUP,
    GUEST_UID,
)


@dataclass(frozen=True)
class RoleFacts:
    """Role membership of one viewer."""

    uid: int = GUEST_UID
    is_admin: bool = False
    is_global_mod: bool = False
    moderated_cids: frozenset[int] = field(default_factory=frozenset)

    @property
    def is_guest(self) -> bool:
        return self.uid <= GUEST_UID

    def is_category_mod(self, cid: int | None) -> bool:
        return cid is not None and cid in self.moderated_cids

    def is_admin_or_global_mod(self) -> bool:
        return self.is_admin or self.is_global_mod

    def is_admin_or_mod(self, cid: int | None) -> bool:
        """Return True for administrators, global moderators and moderators of ``cid``."""
        return self.is_admin_or_global_mod() or self.is_category_mod(cid)

    def is_self(self, uid: int | None) -> bool:
        """Return True when ``uid`` is this viewer. Guests own nothing."""
        return not self.is_guest and uid == self.uid


GUEST = RoleFacts()


def resolve_role_facts(db: Session, uid: int) -> RoleFacts:
    """Load group and category-moderator membership for ``uid``.

    Args:
        db: Database session
        uid: Viewer uid; 0 or negative means guest

    Returns:
        RoleFacts for the viewer. Guests get no roles.
    """
    if uid <= GUEST_UID:
        return GUEST

    groups = set(
        db.scalars(select(GroupMembership.group_name).where(GroupMembership.uid == uid))
    )
    moderated = set(
        db.scalars(select(CategoryModerator.cid).where(CategoryModerator.uid == uid))
    )
    if moderated and settings.inherit_parent_category_moderators:
        moderated |= _unmoderated_descendants(db, moderated)

    return RoleFacts(
        uid=uid,
        is_admin=ADMINISTRATORS_GROUP in groups,
        is_global_mod=GLOBAL_MODERATORS_GROUP in groups,
        moderated_cids=frozenset(moderated),
    )


def _unmoderated_descendants(db: Session, roots: set[int]) -> set[int]:
    """Return child categories with no moderators of their own below ``roots``."""
    staffed = set(db.scalars(select(CategoryModerator.cid).distinct()))
    children: dict[int, list[int]] = {}
    for cid, parent_cid in db.execute(select(Category.cid, Category.parent_cid)):
        if parent_cid is not None:
            children.setdefault(parent_cid, []).append(cid)

    inherited: set[int] = set()
    pending = list(roots)
    while pending:
        for child in children.get(pending.pop(), []):
            if child in staffed or child in inherited or child in roots:
                continue
            inherited.add(child)
            pending.append(child)
    return inherited
