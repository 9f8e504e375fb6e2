"""Homework submission and grading."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from ..core.context import Actor
from ..models import Assignment, HomeworkSubmission
from .course_service import is_enrolled
from .crediting_service import MAX_HOMEWORK_GRADE


class HomeworkRuleViolation(Exception):
    """Raised when homework rules are violated."""

    def __init__(self, detail: str, status_code: int = 400) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


def get_assignment(session: Session, assignment_id: UUID) -> Assignment:
    assignment = session.get(Assignment, assignment_id)
    if assignment is None:
        raise HomeworkRuleViolation(f"Assignment {assignment_id} not found", status_code=404)
    return assignment


def get_submission(session: Session, submission_id: UUID) -> HomeworkSubmission:
    stmt = (
        select(HomeworkSubmission)
        .options(joinedload(HomeworkSubmission.assignment))
        .where(HomeworkSubmission.submission_id == submission_id)
    )
    submission = session.execute(stmt).scalar_one_or_none()
    if submission is None:
        raise HomeworkRuleViolation(f"Submission {submission_id} not found", status_code=404)
    return submission


def submit(
    session: Session,
    *,
    actor: Actor,
    assignment_id: UUID,
    content: Optional[str] = None,
    file_url: Optional[str] = None,
    now: Optional[datetime] = None,
) -> HomeworkSubmission:
    """Create or overwrite the acting student's submission before the deadline."""

    if not (content and content.strip()) and not file_url:
        raise HomeworkRuleViolation("Submission needs text content or a file.")

    assignment = get_assignment(session, assignment_id)
    if not is_enrolled(session, course_id=assignment.course_id, user_id=actor.user_id):
        raise HomeworkRuleViolation("Only enrolled students can submit homework.", status_code=403)

    now = now or datetime.utcnow()
    if assignment.due_at is not None and now > assignment.due_at:
        raise HomeworkRuleViolation("Submission closed: the assignment is overdue.")

    stmt = select(HomeworkSubmission).where(
        HomeworkSubmission.assignment_id == assignment.assignment_id,
        HomeworkSubmission.student_id == actor.user_id,
    )
    submission = session.execute(stmt).scalar_one_or_none()
    if submission is None:
        submission = HomeworkSubmission(
            assignment_id=assignment.assignment_id,
            student_id=actor.user_id,
        )
        session.add(submission)

    submission.content = content
    submission.file_url = file_url
    submission.submitted_at = now
    session.flush()
    return submission


def grade(
    session: Session,
    *,
    actor: Actor,
    submission_id: UUID,
    grade_value: int,
    feedback: Optional[str] = None,
) -> HomeworkSubmission:
    """Record a grade. Re-grading overwrites the previous grade and feedback."""

    if not actor.is_organizer:
        raise HomeworkRuleViolation("Only organizers can grade homework.", status_code=403)
    if not 0 <= grade_value <= MAX_HOMEWORK_GRADE:
        raise HomeworkRuleViolation(f"Grade must be between 0 and {MAX_HOMEWORK_GRADE}.")

    submission = get_submission(session, submission_id)
    submission.grade = grade_value
    submission.feedback = feedback
    submission.graded_by = actor.user_id
    submission.graded_at = datetime.utcnow()
    session.flush()
    return submission


def list_submissions(session: Session, *, assignment_id: UUID) -> Sequence[HomeworkSubmission]:
    get_assignment(session, assignment_id)
    stmt = (
        select(HomeworkSubmission)
        .where(HomeworkSubmission.assignment_id == assignment_id)
        .order_by(HomeworkSubmission.submitted_at.asc())
    )
    return session.execute(stmt).scalars().all()
