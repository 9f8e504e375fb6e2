"""Pydantic schemas for user endpoints."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models import UserRole


class UserSummary(BaseModel):
    """Lightweight projection of user details."""

    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    display_name: str
    avatar_url: Optional[str] = None


class UserCreate(BaseModel):
    """Registration payload for an identity-provider account."""

    user_id: UUID
    display_name: str = Field(..., min_length=1, max_length=80)
    bio: Optional[str] = Field(None, max_length=500)
    avatar_url: Optional[str] = None


class UserUpdate(BaseModel):
    """Profile edit; omitted fields are left unchanged."""

    display_name: Optional[str] = Field(None, min_length=1, max_length=80)
    bio: Optional[str] = Field(None, max_length=500)
    avatar_url: Optional[str] = None


class UserRead(BaseModel):
    """Full profile, including the cached credit total."""

    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    display_name: str
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    role: UserRole
    total_credits: int
    created_at: datetime
    updated_at: datetime


class PromotionRequest(BaseModel):
    """Shared secret proving the caller may grant the organizer role."""

    secret_key: str = Field(..., min_length=1)
