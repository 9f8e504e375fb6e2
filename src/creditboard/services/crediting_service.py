"""Crediting rules: which domain events move the ledger, and by how much.

Automatic credits are side effects of a primary action (a post, an
attendance save, a grade). They run after the primary action has been
committed, in their own database transaction, so a ledger failure can never
undo the action that triggered it. Transient storage errors are retried with
exponential backoff; anything still failing is parked as a
:class:`~creditboard.models.PendingCredit` for reconciliation.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session
from tenacity import Retrying, before_sleep_log, retry_if_exception, stop_after_attempt, wait_exponential

from ..core.config import get_settings
from ..core.context import Actor
from ..models import (
    Assignment,
    AttendanceStatus,
    Comment,
    CreditAction,
    CreditEventType,
    CreditTransaction,
    HomeworkSubmission,
    Lecture,
    Material,
    PendingCredit,
    PendingCreditStatus,
    Post,
)
from . import ledger_service
from .ledger_service import DuplicateCreditError, LedgerRuleViolation

logger = logging.getLogger(__name__)

POST_CREDITS = 2
COMMENT_CREDITS = 1
ATTENDANCE_CREDITS = 5
MATERIAL_SHARE_CREDITS = 10
MAX_HOMEWORK_GRADE = 20

FEED_CONTEXT = "the community feed"


class CreditOutcome(str, enum.Enum):
    """Result of running a credit side effect."""

    APPLIED = "APPLIED"
    UNCHANGED = "UNCHANGED"
    DEFERRED = "DEFERRED"


@dataclass(frozen=True)
class CreditEffect:
    """A ledger change derived from one domain event."""

    action: CreditAction
    user_id: UUID
    event_type: CreditEventType
    reason: str
    amount: int = 0
    idempotency_key: Optional[str] = None
    issuer_id: Optional[UUID] = None

    @classmethod
    def from_pending(cls, pending: PendingCredit) -> "CreditEffect":
        return cls(
            action=pending.action,
            user_id=pending.user_id,
            event_type=pending.event_type,
            reason=pending.reason,
            amount=pending.amount,
            idempotency_key=pending.idempotency_key,
            issuer_id=pending.issuer_id,
        )


# Event -> effect mapping


def post_effect(post: Post) -> CreditEffect:
    context = post.course.title if post.course is not None else FEED_CONTEXT
    return CreditEffect(
        action=CreditAction.GRANT,
        user_id=post.author_id,
        event_type=CreditEventType.POST,
        reason=f"Post in {context}",
        amount=POST_CREDITS,
        idempotency_key=f"post:{post.post_id}",
        issuer_id=post.author_id,
    )


def comment_effect(comment: Comment) -> CreditEffect:
    return CreditEffect(
        action=CreditAction.GRANT,
        user_id=comment.author_id,
        event_type=CreditEventType.COMMENT,
        reason="Comment on a post",
        amount=COMMENT_CREDITS,
        idempotency_key=f"comment:{comment.comment_id}",
        issuer_id=comment.author_id,
    )


def attendance_reason(lecture: Lecture) -> str:
    return f'Attendance for lecture: "{lecture.title}"'


def attendance_effect(
    lecture: Lecture,
    *,
    student_id: UUID,
    status: AttendanceStatus,
    organizer_id: UUID,
) -> CreditEffect:
    """Present grants the attendance credit, absent takes it back."""

    action = CreditAction.GRANT if status == AttendanceStatus.PRESENT else CreditAction.REVOKE
    return CreditEffect(
        action=action,
        user_id=student_id,
        event_type=CreditEventType.ATTENDANCE,
        reason=attendance_reason(lecture),
        amount=ATTENDANCE_CREDITS,
        idempotency_key=f"attendance:{lecture.lecture_id}",
        issuer_id=organizer_id,
    )


def material_effect(material: Material) -> Optional[CreditEffect]:
    """Only student contributions earn credit."""

    if not material.is_student_contribution:
        return None
    return CreditEffect(
        action=CreditAction.GRANT,
        user_id=material.uploader_id,
        event_type=CreditEventType.MATERIAL_SHARE,
        reason=f"Shared material in {material.section}: {material.title}",
        amount=MATERIAL_SHARE_CREDITS,
        idempotency_key=f"material:{material.material_id}",
        issuer_id=material.uploader_id,
    )


def homework_effect(submission: HomeworkSubmission, assignment: Assignment, *, grader_id: UUID) -> CreditEffect:
    """Grading replaces whatever the previous grade credited."""

    return CreditEffect(
        action=CreditAction.REPLACE,
        user_id=submission.student_id,
        event_type=CreditEventType.HOMEWORK_GRADE,
        reason=f'Homework grade for "{assignment.title}"',
        amount=submission.grade or 0,
        idempotency_key=f"homework:{submission.submission_id}",
        issuer_id=grader_id,
    )


# Ledger application


def apply_effect(session: Session, effect: CreditEffect) -> CreditOutcome:
    """Apply ``effect`` inside the current transaction without committing."""

    if effect.action == CreditAction.GRANT:
        if effect.idempotency_key is not None:
            existing = ledger_service.find_by_key(
                session, user_id=effect.user_id, idempotency_key=effect.idempotency_key
            )
            if existing is not None:
                logger.debug("credit %s already granted to %s", effect.idempotency_key, effect.user_id)
                return CreditOutcome.UNCHANGED
        _record(session, effect)
        return CreditOutcome.APPLIED

    if effect.action == CreditAction.REVOKE:
        removed = ledger_service.revoke_by_key(
            session, user_id=effect.user_id, idempotency_key=effect.idempotency_key
        )
        return CreditOutcome.APPLIED if removed else CreditOutcome.UNCHANGED

    # REPLACE
    existing = ledger_service.find_by_key(session, user_id=effect.user_id, idempotency_key=effect.idempotency_key)
    if existing is not None and existing.amount == effect.amount:
        return CreditOutcome.UNCHANGED
    if existing is not None:
        ledger_service.revoke_by_key(session, user_id=effect.user_id, idempotency_key=effect.idempotency_key)
        # Delete must reach the database before the same key is inserted again.
        session.flush()
    if effect.amount != 0:
        _record(session, effect)
    return CreditOutcome.APPLIED if existing is not None or effect.amount != 0 else CreditOutcome.UNCHANGED


def _record(session: Session, effect: CreditEffect) -> CreditTransaction:
    return ledger_service.record(
        session,
        user_id=effect.user_id,
        amount=effect.amount,
        reason=effect.reason,
        issuer_id=effect.issuer_id,
        event_type=effect.event_type,
        idempotency_key=effect.idempotency_key,
    )


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, DuplicateCreditError):
        # Raised only for REPLACE and REVOKE; the next attempt re-reads the ledger.
        return True
    if isinstance(exc, OperationalError):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


def _retrying() -> Retrying:
    settings = get_settings()
    return Retrying(
        stop=stop_after_attempt(settings.ledger_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.ledger_retry_base_delay,
            max=settings.ledger_retry_max_delay,
        ),
        retry=retry_if_exception(_is_transient),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


def supersede_pending(session: Session, effect: CreditEffect) -> int:
    """Mark parked effects for the same event instance as superseded by ``effect``."""

    if effect.idempotency_key is None:
        return 0
    result = session.execute(
        update(PendingCredit)
        .where(
            PendingCredit.user_id == effect.user_id,
            PendingCredit.idempotency_key == effect.idempotency_key,
            PendingCredit.status == PendingCreditStatus.PENDING,
        )
        .values(status=PendingCreditStatus.SUPERSEDED, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount:
        logger.info(
            "superseded %d pending credit(s) %s for %s", result.rowcount, effect.idempotency_key, effect.user_id
        )
    return result.rowcount


def commit_effect(session: Session, effect: CreditEffect) -> CreditOutcome:
    """Apply and commit ``effect`` with bounded retries on transient errors.

    A duplicate key on a GRANT means a concurrent writer already granted the
    credit; that is reported as UNCHANGED. For REPLACE and REVOKE the ledger
    is re-read and the effect applied again. Other errors propagate after the
    last attempt. Once committed, older parked effects for the same key are
    superseded.
    """

    for attempt in _retrying():
        with attempt:
            try:
                outcome = apply_effect(session, effect)
                supersede_pending(session, effect)
                session.commit()
                return outcome
            except DuplicateCreditError:
                session.rollback()
                if effect.action != CreditAction.GRANT:
                    logger.info("concurrent write on credit %s for %s", effect.idempotency_key, effect.user_id)
                    raise
                logger.info("concurrent duplicate for credit %s on %s", effect.idempotency_key, effect.user_id)
                supersede_pending(session, effect)
                session.commit()
                return CreditOutcome.UNCHANGED
            except SQLAlchemyError:
                session.rollback()
                raise


def run_credit_side_effect(session: Session, effect: Optional[CreditEffect]) -> Optional[CreditOutcome]:
    """Best-effort crediting after a committed primary action. Never raises."""

    if effect is None:
        return None

    try:
        return commit_effect(session, effect)
    except (SQLAlchemyError, LedgerRuleViolation) as exc:
        session.rollback()
        logger.exception(
            "credit %s for %s failed, parking for reconciliation",
            effect.idempotency_key or effect.reason,
            effect.user_id,
        )
        _park(session, effect, exc)
        return CreditOutcome.DEFERRED


def _park(session: Session, effect: CreditEffect, exc: BaseException) -> None:
    pending = PendingCredit(
        action=effect.action,
        user_id=effect.user_id,
        issuer_id=effect.issuer_id,
        event_type=effect.event_type,
        amount=effect.amount,
        reason=effect.reason,
        idempotency_key=effect.idempotency_key,
        attempts=1,
        last_error=str(exc)[:500],
    )
    try:
        supersede_pending(session, effect)
        session.add(pending)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception("could not park credit %s for %s; manual reconciliation required", effect, effect.user_id)


# Manual awards


def award_bonus(
    session: Session,
    *,
    actor: Actor,
    user_id: UUID,
    amount: int,
    reason: str,
) -> CreditTransaction:
    """Organizer-issued bonus. This is the primary action, so errors propagate."""

    if not actor.is_organizer:
        raise LedgerRuleViolation("Only organizers can award bonus credits.", status_code=403)
    if amount <= 0:
        raise LedgerRuleViolation("Bonus amount must be a positive integer.")
    if not (reason or "").strip():
        raise LedgerRuleViolation("Bonus reason must not be empty.")

    return ledger_service.record(
        session,
        user_id=user_id,
        amount=amount,
        reason=reason,
        issuer_id=actor.user_id,
        event_type=CreditEventType.BONUS,
    )
