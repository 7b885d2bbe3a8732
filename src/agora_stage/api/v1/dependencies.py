"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from agora_stage.core.errors import NotLoggedIn
from agora_stage.core.security import decode_access_token
from agora_stage.db.session import get_db
from agora_stage.models import User
from agora_stage.services.roles import GUEST, RoleFacts, resolve_role_facts

# HTTP Bearer scheme for JWT authentication; guests send no header at all.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_viewer(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> RoleFacts:
    """Resolve the role facts of the caller, falling back to the guest.

    Args:
        credentials: Optional HTTP Bearer token credentials
        db: Database session

    Returns:
        RoleFacts for the authenticated user, or the guest facts (uid 0)

    Raises:
        HTTPException: If a token is sent but is invalid or names no user
    """
    if credentials is None:
        return GUEST

    uid = decode_access_token(credentials.credentials)
    if uid is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    if db.get(User, uid) is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return resolve_role_facts(db, uid)


ViewerDep = Annotated[RoleFacts, Depends(get_viewer)]


def get_actor(viewer: ViewerDep) -> RoleFacts:
    """Require an authenticated caller for mutations."""
    if viewer.is_guest:
        raise NotLoggedIn()
    return viewer


# Type alias for the authenticated caller of a mutation
ActorDep = Annotated[RoleFacts, Depends(get_actor)]
