"""Request-scoped dependencies resolving the acting user."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from ..core.context import Actor
from ..core.database import get_db
from ..models import User


def get_actor(
    x_user_id: Optional[UUID] = Header(
        None,
        description="Authenticated user id forwarded by the identity gateway.",
    ),
    db: Session = Depends(get_db),
) -> Actor:
    """Resolve the caller into an explicit :class:`Actor`."""

    if x_user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-User-Id header")
    user = db.get(User, x_user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown user")
    return Actor(user_id=user.user_id, role=user.role)


def require_organizer(actor: Actor = Depends(get_actor)) -> Actor:
    if not actor.is_organizer:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Organizer role required")
    return actor
