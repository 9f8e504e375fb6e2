"""User registration, profile edits and role promotion."""

from __future__ import annotations

import hmac
import logging
from datetime import datetime
from typing import Optional
from urllib.parse import quote
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.config import get_settings
from ..models import User, UserRole

logger = logging.getLogger(__name__)

AVATAR_URL_TEMPLATE = "https://ui-avatars.com/api/?name={name}&background=random"


class UserRuleViolation(Exception):
    """Raised when user rules are violated."""

    def __init__(self, detail: str, status_code: int = 400) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


def get_user(session: Session, user_id: UUID) -> User:
    stmt = select(User).where(User.user_id == user_id)
    user = session.execute(stmt).scalar_one_or_none()
    if user is None:
        raise UserRuleViolation(f"User {user_id} not found", status_code=404)
    return user


def register(
    session: Session,
    *,
    user_id: UUID,
    display_name: str,
    bio: Optional[str] = None,
    avatar_url: Optional[str] = None,
) -> User:
    """Create the profile for an identity-provider account. New users are students."""

    display_name = display_name.strip()
    if not display_name:
        raise UserRuleViolation("Display name must not be empty.")
    if session.get(User, user_id) is not None:
        raise UserRuleViolation(f"User {user_id} is already registered.", status_code=409)

    user = User(
        user_id=user_id,
        display_name=display_name,
        bio=bio,
        avatar_url=avatar_url or AVATAR_URL_TEMPLATE.format(name=quote(display_name)),
        role=UserRole.STUDENT,
        total_credits=0,
    )
    session.add(user)
    session.flush()
    return user


def update_profile(
    session: Session,
    *,
    user_id: UUID,
    display_name: Optional[str] = None,
    bio: Optional[str] = None,
    avatar_url: Optional[str] = None,
) -> User:
    user = get_user(session, user_id)
    if display_name is not None:
        if not display_name.strip():
            raise UserRuleViolation("Display name must not be empty.")
        user.display_name = display_name.strip()
    if bio is not None:
        user.bio = bio
    if avatar_url is not None:
        user.avatar_url = avatar_url
    user.updated_at = datetime.utcnow()
    session.flush()
    return user


def promote_to_organizer(session: Session, *, user_id: UUID, secret_key: str) -> User:
    """Promote a user to organizer when the shared secret matches.

    Promotion is one-way; promoting an organizer again is a no-op.
    """

    expected = get_settings().promotion_secret
    if not expected or not hmac.compare_digest(secret_key.encode(), expected.encode()):
        logger.warning("rejected promotion attempt for %s", user_id)
        raise UserRuleViolation("Invalid secret key", status_code=401)

    user = get_user(session, user_id)
    if user.role != UserRole.ORGANIZER:
        user.role = UserRole.ORGANIZER
        user.updated_at = datetime.utcnow()
        session.flush()
        logger.info("promoted %s to organizer", user_id)
    return user
