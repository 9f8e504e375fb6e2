"""Leaderboard response schemas."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models import UserRole


class LeaderboardEntry(BaseModel):
    """Ranked user with cached credit total."""

    model_config = ConfigDict(from_attributes=True)

    rank: int = Field(..., ge=1)
    user_id: UUID
    display_name: str
    avatar_url: Optional[str] = None
    role: UserRole
    total_credits: int
