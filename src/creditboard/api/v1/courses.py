"""Course, enrollment, lecture and assignment endpoints."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ...core.context import Actor
from ...core.database import get_db
from ...schemas import (
    AssignmentCreate,
    AssignmentRead,
    CourseCreate,
    CourseRead,
    EnrollmentRead,
    LectureCreate,
    LectureRead,
    UserSummary,
)
from ...services import course_service
from ...services.course_service import CourseRuleViolation
from ..dependencies import get_actor, require_organizer

router = APIRouter(prefix="/courses", tags=["courses"])


@router.post("", response_model=CourseRead, status_code=status.HTTP_201_CREATED, summary="Create a course")
def create_course(
    payload: CourseCreate,
    actor: Actor = Depends(require_organizer),
    db: Session = Depends(get_db),
) -> CourseRead:
    try:
        course = course_service.create_course(db, actor=actor, title=payload.title, description=payload.description)
        db.commit()
        db.refresh(course)
        return course
    except CourseRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get("", response_model=List[CourseRead], summary="List courses")
def list_courses(
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
) -> List[CourseRead]:
    return list(course_service.list_courses(db, limit=limit, offset=offset))


@router.post(
    "/{course_id}/enrollments",
    response_model=EnrollmentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll the current user",
    responses={404: {"description": "Course not found"}, 409: {"description": "Already enrolled"}},
)
def enroll(
    course_id: UUID,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
) -> EnrollmentRead:
    try:
        enrollment = course_service.enroll(db, actor=actor, course_id=course_id)
        db.commit()
        db.refresh(enrollment)
        return enrollment
    except CourseRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get("/{course_id}/students", response_model=List[UserSummary], summary="Enrolled users")
def list_students(course_id: UUID, db: Session = Depends(get_db)) -> List[UserSummary]:
    try:
        return list(course_service.list_students(db, course_id=course_id))
    except CourseRuleViolation as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.post(
    "/{course_id}/lectures",
    response_model=LectureRead,
    status_code=status.HTTP_201_CREATED,
    summary="Schedule a lecture",
)
def create_lecture(
    course_id: UUID,
    payload: LectureCreate,
    actor: Actor = Depends(require_organizer),
    db: Session = Depends(get_db),
) -> LectureRead:
    try:
        lecture = course_service.create_lecture(
            db,
            actor=actor,
            course_id=course_id,
            title=payload.title,
            scheduled_at=payload.scheduled_at,
        )
        db.commit()
        db.refresh(lecture)
        return lecture
    except CourseRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get("/{course_id}/lectures", response_model=List[LectureRead], summary="List lectures")
def list_lectures(course_id: UUID, db: Session = Depends(get_db)) -> List[LectureRead]:
    try:
        return list(course_service.list_lectures(db, course_id=course_id))
    except CourseRuleViolation as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.post(
    "/{course_id}/assignments",
    response_model=AssignmentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Publish an assignment",
)
def create_assignment(
    course_id: UUID,
    payload: AssignmentCreate,
    actor: Actor = Depends(require_organizer),
    db: Session = Depends(get_db),
) -> AssignmentRead:
    try:
        assignment = course_service.create_assignment(
            db,
            actor=actor,
            course_id=course_id,
            title=payload.title,
            description=payload.description,
            due_at=payload.due_at,
        )
        db.commit()
        db.refresh(assignment)
        return assignment
    except CourseRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
