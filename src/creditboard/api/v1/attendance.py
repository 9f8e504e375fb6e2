"""Attendance endpoints. Saving attendance also settles attendance credits."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...core.context import Actor
from ...core.database import get_db
from ...schemas import AttendanceCreditResult, AttendanceReceipt, AttendanceRecordRead, AttendanceSave
from ...services import attendance_service, crediting_service
from ...services.attendance_service import AttendanceRuleViolation
from ..dependencies import require_organizer

router = APIRouter(prefix="/lectures", tags=["attendance"])


@router.put(
    "/{lecture_id}/attendance",
    response_model=AttendanceReceipt,
    summary="Save attendance for a lecture",
    responses={
        400: {"description": "Student not enrolled"},
        403: {"description": "Organizer role required"},
        404: {"description": "Lecture not found"},
    },
)
def save_attendance(
    lecture_id: UUID,
    payload: AttendanceSave,
    actor: Actor = Depends(require_organizer),
    db: Session = Depends(get_db),
) -> AttendanceReceipt:
    """Store each student's status, then grant or revoke the attendance credit per student.

    Example request body::

        {
            "entries": [
                {"student_id": "bbbbbbbb-bbbb-bbbb-bbbb-bbbbbbbbbbbb", "status": "present"},
                {"student_id": "cccccccc-cccc-cccc-cccc-cccccccccccc", "status": "absent"}
            ]
        }
    """

    statuses = {entry.student_id: entry.status for entry in payload.entries}
    try:
        records = attendance_service.save_attendance(db, actor=actor, lecture_id=lecture_id, statuses=statuses)
        db.commit()
    except AttendanceRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc

    saved = [AttendanceRecordRead.model_validate(record) for record in records]
    lecture = attendance_service.get_lecture(db, lecture_id)

    credits = []
    for student_id, status in statuses.items():
        effect = crediting_service.attendance_effect(
            lecture,
            student_id=student_id,
            status=status,
            organizer_id=actor.user_id,
        )
        outcome = crediting_service.run_credit_side_effect(db, effect)
        credits.append(AttendanceCreditResult(student_id=student_id, credit=outcome))

    return AttendanceReceipt(records=saved, credits=credits)


@router.get("/{lecture_id}/attendance", response_model=List[AttendanceRecordRead], summary="Attendance for a lecture")
def list_attendance(
    lecture_id: UUID,
    actor: Actor = Depends(require_organizer),
    db: Session = Depends(get_db),
) -> List[AttendanceRecordRead]:
    try:
        return list(attendance_service.list_attendance(db, lecture_id=lecture_id))
    except AttendanceRuleViolation as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
