"""Pydantic schemas for courses, lectures and assignments."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CourseCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None


class CourseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    course_id: UUID
    title: str
    description: Optional[str] = None
    created_by: UUID
    created_at: datetime


class EnrollmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    enrollment_id: UUID
    course_id: UUID
    user_id: UUID
    created_at: datetime


class LectureCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    scheduled_at: Optional[datetime] = None


class LectureRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    lecture_id: UUID
    course_id: UUID
    title: str
    scheduled_at: Optional[datetime] = None


class AssignmentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    due_at: Optional[datetime] = None


class AssignmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    assignment_id: UUID
    course_id: UUID
    title: str
    description: Optional[str] = None
    due_at: Optional[datetime] = None
