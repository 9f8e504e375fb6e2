"""Pydantic schemas for attendance endpoints."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models import AttendanceStatus
from ..services.crediting_service import CreditOutcome


class AttendanceEntry(BaseModel):
    student_id: UUID
    status: AttendanceStatus


class AttendanceSave(BaseModel):
    """Target status for each listed student at one lecture."""

    entries: List[AttendanceEntry] = Field(..., min_length=1)


class AttendanceRecordRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    record_id: UUID
    lecture_id: UUID
    student_id: UUID
    status: AttendanceStatus
    organizer_id: Optional[UUID] = None
    updated_at: datetime


class AttendanceCreditResult(BaseModel):
    student_id: UUID
    credit: Optional[CreditOutcome] = None


class AttendanceReceipt(BaseModel):
    """Saved records plus the independent crediting outcome per student."""

    records: List[AttendanceRecordRead]
    credits: List[AttendanceCreditResult]
