"""Attendance bookkeeping for lectures."""

from __future__ import annotations

from datetime import datetime
from typing import Mapping, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from ..core.context import Actor
from ..models import AttendanceRecord, AttendanceStatus, Enrollment, Lecture


class AttendanceRuleViolation(Exception):
    """Raised when attendance rules are violated."""

    def __init__(self, detail: str, status_code: int = 400) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


def get_lecture(session: Session, lecture_id: UUID) -> Lecture:
    lecture = session.get(Lecture, lecture_id)
    if lecture is None:
        raise AttendanceRuleViolation(f"Lecture {lecture_id} not found", status_code=404)
    return lecture


def save_attendance(
    session: Session,
    *,
    actor: Actor,
    lecture_id: UUID,
    statuses: Mapping[UUID, AttendanceStatus],
) -> list[AttendanceRecord]:
    """Insert or update one record per (lecture, student).

    Every student must be enrolled in the lecture's course. Crediting is left
    to the caller, after this has been committed.
    """

    if not actor.is_organizer:
        raise AttendanceRuleViolation("Only organizers can record attendance.", status_code=403)

    lecture = get_lecture(session, lecture_id)
    if not statuses:
        return []

    enrolled = set(
        session.execute(
            select(Enrollment.user_id).where(
                Enrollment.course_id == lecture.course_id,
                Enrollment.user_id.in_(list(statuses)),
            )
        ).scalars()
    )
    missing = [str(student_id) for student_id in statuses if student_id not in enrolled]
    if missing:
        raise AttendanceRuleViolation(f"Students not enrolled in this course: {', '.join(missing)}")

    existing = {
        record.student_id: record
        for record in session.execute(
            select(AttendanceRecord).where(
                AttendanceRecord.lecture_id == lecture.lecture_id,
                AttendanceRecord.student_id.in_(list(statuses)),
            )
        ).scalars()
    }

    now = datetime.utcnow()
    records = []
    for student_id, status in statuses.items():
        record = existing.get(student_id)
        if record is None:
            record = AttendanceRecord(
                lecture_id=lecture.lecture_id,
                student_id=student_id,
                status=status,
                organizer_id=actor.user_id,
            )
            session.add(record)
        else:
            record.status = status
            record.organizer_id = actor.user_id
            record.updated_at = now
        records.append(record)

    session.flush()
    return records


def list_attendance(session: Session, *, lecture_id: UUID) -> Sequence[AttendanceRecord]:
    get_lecture(session, lecture_id)
    stmt = (
        select(AttendanceRecord)
        .options(joinedload(AttendanceRecord.student))
        .where(AttendanceRecord.lecture_id == lecture_id)
    )
    return session.execute(stmt).scalars().all()
