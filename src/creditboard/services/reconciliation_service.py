"""Replay parked credit side effects and repair cached totals."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import get_settings
from ..models import PendingCredit, PendingCreditStatus, User
from . import crediting_service, ledger_service
from .crediting_service import CreditEffect
from .ledger_service import LedgerRuleViolation

logger = logging.getLogger(__name__)


def retry_pending_credits(session: Session, *, max_attempts: Optional[int] = None) -> dict[str, int]:
    """Apply every PENDING credit oldest first, committing each independently.

    Only the latest effect per event instance is still PENDING; older ones
    were superseded when it was parked or applied.
    """

    if max_attempts is None:
        max_attempts = get_settings().pending_credit_max_attempts

    summary = {"resolved": 0, "failed": 0, "still_pending": 0}

    pending_ids = session.execute(
        select(PendingCredit.pending_id)
        .where(PendingCredit.status == PendingCreditStatus.PENDING)
        .order_by(PendingCredit.created_at.asc())
    ).scalars().all()

    for pending_id in pending_ids:
        pending = session.get(PendingCredit, pending_id)
        if pending.status != PendingCreditStatus.PENDING:
            continue
        effect = CreditEffect.from_pending(pending)
        try:
            crediting_service.apply_effect(session, effect)
            pending.status = PendingCreditStatus.RESOLVED
            pending.attempts += 1
            pending.last_error = None
            pending.updated_at = datetime.utcnow()
            session.commit()
            summary["resolved"] += 1
            logger.info("resolved pending credit %s", pending_id)
        except (SQLAlchemyError, LedgerRuleViolation) as exc:
            session.rollback()
            pending = session.get(PendingCredit, pending_id)
            pending.attempts += 1
            pending.last_error = str(exc)[:500]
            pending.updated_at = datetime.utcnow()
            if pending.attempts >= max_attempts:
                pending.status = PendingCreditStatus.FAILED
                summary["failed"] += 1
                logger.error("pending credit %s failed after %d attempts", pending_id, pending.attempts)
            else:
                summary["still_pending"] += 1
                logger.warning("pending credit %s attempt %d failed: %s", pending_id, pending.attempts, exc)
            session.commit()

    return summary


def reconcile_totals(session: Session) -> int:
    """Recompute each cached ``total_credits`` from the ledger; return how many drifted."""

    drifted = 0
    user_ids = session.execute(select(User.user_id)).scalars().all()
    for user_id in user_ids:
        if ledger_service.recompute_total(session, user_id):
            drifted += 1
    session.commit()
    return drifted


def run_reconciliation(session: Session) -> dict[str, int]:
    """Replay parked credits, then repair totals. Returns summary counts."""

    summary = retry_pending_credits(session)
    summary["totals_repaired"] = reconcile_totals(session)
    return summary
