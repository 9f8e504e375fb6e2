"""Pydantic schemas for shared materials."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..services.crediting_service import CreditOutcome


class MaterialCreate(BaseModel):
    section: str = Field(..., min_length=1, max_length=120)
    title: str = Field(..., min_length=1, max_length=200)
    url: str = Field(..., min_length=1, description="Location of the file in object storage.")


class MaterialRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    material_id: UUID
    course_id: UUID
    uploader_id: UUID
    section: str
    title: str
    url: str
    is_student_contribution: bool
    created_at: datetime


class MaterialReceipt(BaseModel):
    material: MaterialRead
    credit: Optional[CreditOutcome] = None
