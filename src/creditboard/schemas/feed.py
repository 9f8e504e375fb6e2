"""Pydantic schemas for feed endpoints."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..services.crediting_service import CreditOutcome
from .user import UserSummary


class PostCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)
    course_id: Optional[UUID] = None


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)


class CommentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    comment_id: UUID
    post_id: UUID
    author: UserSummary
    content: str
    created_at: datetime


class PostRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    post_id: UUID
    author: UserSummary
    course_id: Optional[UUID] = None
    content: str
    created_at: datetime
    comments: List[CommentRead] = []


class PostReceipt(BaseModel):
    post: PostRead
    credit: Optional[CreditOutcome] = None


class CommentReceipt(BaseModel):
    comment: CommentRead
    credit: Optional[CreditOutcome] = None
