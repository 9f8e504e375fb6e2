"""Courses, enrollments, lectures and assignments."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.context import Actor
from ..models import Assignment, Course, Enrollment, Lecture, User


class CourseRuleViolation(Exception):
    """Raised when course rules are violated."""

    def __init__(self, detail: str, status_code: int = 400) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


def _require_organizer(actor: Actor) -> None:
    if not actor.is_organizer:
        raise CourseRuleViolation("Organizer role required.", status_code=403)


def get_course(session: Session, course_id: UUID) -> Course:
    course = session.get(Course, course_id)
    if course is None:
        raise CourseRuleViolation(f"Course {course_id} not found", status_code=404)
    return course


def is_enrolled(session: Session, *, course_id: UUID, user_id: UUID) -> bool:
    stmt = select(Enrollment.enrollment_id).where(
        Enrollment.course_id == course_id,
        Enrollment.user_id == user_id,
    )
    return session.execute(stmt).first() is not None


def create_course(session: Session, *, actor: Actor, title: str, description: Optional[str] = None) -> Course:
    _require_organizer(actor)
    course = Course(title=title, description=description, created_by=actor.user_id)
    session.add(course)
    session.flush()
    return course


def list_courses(session: Session, *, limit: int = 50, offset: int = 0) -> Sequence[Course]:
    stmt = select(Course).order_by(Course.created_at.desc()).offset(offset).limit(limit)
    return session.execute(stmt).scalars().all()


def enroll(session: Session, *, actor: Actor, course_id: UUID) -> Enrollment:
    """Enroll the acting user. Enrolling twice is rejected."""

    course = get_course(session, course_id)
    if is_enrolled(session, course_id=course.course_id, user_id=actor.user_id):
        raise CourseRuleViolation("Already enrolled in this course.", status_code=409)
    enrollment = Enrollment(course_id=course.course_id, user_id=actor.user_id)
    session.add(enrollment)
    session.flush()
    return enrollment


def list_students(session: Session, *, course_id: UUID) -> Sequence[User]:
    get_course(session, course_id)
    stmt = (
        select(User)
        .join(Enrollment, Enrollment.user_id == User.user_id)
        .where(Enrollment.course_id == course_id)
        .order_by(User.display_name.asc())
    )
    return session.execute(stmt).scalars().all()


def create_lecture(
    session: Session,
    *,
    actor: Actor,
    course_id: UUID,
    title: str,
    scheduled_at: Optional[datetime] = None,
) -> Lecture:
    _require_organizer(actor)
    course = get_course(session, course_id)
    lecture = Lecture(course_id=course.course_id, title=title, scheduled_at=scheduled_at)
    session.add(lecture)
    session.flush()
    return lecture


def list_lectures(session: Session, *, course_id: UUID) -> Sequence[Lecture]:
    get_course(session, course_id)
    stmt = (
        select(Lecture)
        .where(Lecture.course_id == course_id)
        .order_by(Lecture.scheduled_at.asc(), Lecture.created_at.asc())
    )
    return session.execute(stmt).scalars().all()


def create_assignment(
    session: Session,
    *,
    actor: Actor,
    course_id: UUID,
    title: str,
    description: Optional[str] = None,
    due_at: Optional[datetime] = None,
) -> Assignment:
    _require_organizer(actor)
    course = get_course(session, course_id)
    assignment = Assignment(course_id=course.course_id, title=title, description=description, due_at=due_at)
    session.add(assignment)
    session.flush()
    return assignment
