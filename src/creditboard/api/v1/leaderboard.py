"""Leaderboard endpoint."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...core.config import get_settings
from ...core.database import get_db
from ...schemas import LeaderboardEntry
from ...services import leaderboard_service

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get(
    "",
    response_model=List[LeaderboardEntry],
    summary="Top credit earners",
    responses={
        200: {
            "description": "Leaderboard entries ordered by total credits",
            "content": {
                "application/json": {
                    "example": [
                        {
                            "rank": 1,
                            "user_id": "bbbbbbbb-bbbb-bbbb-bbbb-bbbbbbbbbbbb",
                            "display_name": "Bianca Liu",
                            "avatar_url": "https://ui-avatars.com/api/?name=Bianca%20Liu&background=random",
                            "role": "student",
                            "total_credits": 80
                        }
                    ]
                }
            },
        }
    },
)
def get_leaderboard(
    limit: Optional[int] = Query(None, ge=1, le=100, description="Number of top users to return"),
    db: Session = Depends(get_db),
) -> List[LeaderboardEntry]:
    """Return users ranked by their credit totals."""

    if limit is None:
        limit = get_settings().leaderboard_default_limit
    users = leaderboard_service.top_users(db, limit=limit)
    response: List[LeaderboardEntry] = []
    for rank, user in enumerate(users, start=1):
        response.append(
            LeaderboardEntry(
                rank=rank,
                user_id=user.user_id,
                display_name=user.display_name,
                avatar_url=user.avatar_url,
                role=user.role,
                total_credits=user.total_credits,
            )
        )
    return response
