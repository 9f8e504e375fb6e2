"""Leaderboard aggregation services."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import User


def top_users(session: Session, *, limit: int = 50) -> Sequence[User]:
    """Return users ordered by cached credit total, then display name."""

    limit = max(1, min(limit, 100))

    stmt = (
        select(User)
        .order_by(User.total_credits.desc(), User.display_name.asc(), User.user_id.asc())
        .limit(limit)
    )
    return session.execute(stmt).scalars().all()
