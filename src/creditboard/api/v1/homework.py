"""Homework submission and grading endpoints."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...core.context import Actor
from ...core.database import get_db
from ...schemas import GradeCreate, GradeReceipt, SubmissionCreate, SubmissionRead
from ...services import crediting_service, homework_service
from ...services.homework_service import HomeworkRuleViolation
from ..dependencies import get_actor, require_organizer

router = APIRouter(tags=["homework"])


@router.put(
    "/assignments/{assignment_id}/submission",
    response_model=SubmissionRead,
    summary="Submit or resubmit homework",
    responses={400: {"description": "Overdue or empty"}, 403: {"description": "Not enrolled"}},
)
def submit_homework(
    assignment_id: UUID,
    payload: SubmissionCreate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
) -> SubmissionRead:
    try:
        submission = homework_service.submit(
            db,
            actor=actor,
            assignment_id=assignment_id,
            content=payload.content,
            file_url=payload.file_url,
        )
        db.commit()
        db.refresh(submission)
        return submission
    except HomeworkRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get(
    "/assignments/{assignment_id}/submissions",
    response_model=List[SubmissionRead],
    summary="Submissions for an assignment",
)
def list_submissions(
    assignment_id: UUID,
    actor: Actor = Depends(require_organizer),
    db: Session = Depends(get_db),
) -> List[SubmissionRead]:
    try:
        return list(homework_service.list_submissions(db, assignment_id=assignment_id))
    except HomeworkRuleViolation as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.put(
    "/submissions/{submission_id}/grade",
    response_model=GradeReceipt,
    summary="Grade a submission",
    responses={404: {"description": "Submission not found"}},
)
def grade_submission(
    submission_id: UUID,
    payload: GradeCreate,
    actor: Actor = Depends(require_organizer),
    db: Session = Depends(get_db),
) -> GradeReceipt:
    """Store the grade, then make the student's grade credit equal to it.

    Example request body::

        {"grade": 17, "feedback": "Clear and well structured."}
    """

    try:
        submission = homework_service.grade(
            db,
            actor=actor,
            submission_id=submission_id,
            grade_value=payload.grade,
            feedback=payload.feedback,
        )
        db.commit()
    except HomeworkRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc

    effect = crediting_service.homework_effect(submission, submission.assignment, grader_id=actor.user_id)
    outcome = crediting_service.run_credit_side_effect(db, effect)
    db.refresh(submission)
    return GradeReceipt(submission=submission, credit=outcome)
