"""Pydantic schemas for homework endpoints."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..services.crediting_service import CreditOutcome, MAX_HOMEWORK_GRADE


class SubmissionCreate(BaseModel):
    content: Optional[str] = None
    file_url: Optional[str] = None


class SubmissionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    submission_id: UUID
    assignment_id: UUID
    student_id: UUID
    content: Optional[str] = None
    file_url: Optional[str] = None
    grade: Optional[int] = None
    feedback: Optional[str] = None
    graded_at: Optional[datetime] = None
    submitted_at: datetime


class GradeCreate(BaseModel):
    grade: int = Field(..., ge=0, le=MAX_HOMEWORK_GRADE)
    feedback: Optional[str] = Field(None, max_length=2000)


class GradeReceipt(BaseModel):
    submission: SubmissionRead
    credit: Optional[CreditOutcome] = None
