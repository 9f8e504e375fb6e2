"""Append-only credit ledger and its cached running totals."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ..models import CreditEventType, CreditTransaction, User

logger = logging.getLogger(__name__)


class LedgerRuleViolation(Exception):
    """Raised when a ledger write is rejected."""

    def __init__(self, detail: str, status_code: int = 400) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


class DuplicateCreditError(LedgerRuleViolation):
    """Raised when an automatic credit for the same event already exists."""

    def __init__(self, user_id: UUID, idempotency_key: str) -> None:
        super().__init__(
            f"Credit '{idempotency_key}' already recorded for user {user_id}.",
            status_code=409,
        )
        self.user_id = user_id
        self.idempotency_key = idempotency_key


def _ensure_user(session: Session, user_id: UUID) -> User:
    stmt = select(User).where(User.user_id == user_id)
    user = session.execute(stmt).scalar_one_or_none()
    if user is None:
        raise LedgerRuleViolation(f"User {user_id} not found", status_code=404)
    return user


def _adjust_cached_total(session: Session, user_id: UUID, delta: int) -> None:
    # Relative update so concurrent writers do not overwrite each other.
    session.execute(
        update(User)
        .where(User.user_id == user_id)
        .values(total_credits=User.total_credits + delta, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    user = session.get(User, user_id)
    if user is not None:
        session.refresh(user, attribute_names=["total_credits", "updated_at"])


def record(
    session: Session,
    *,
    user_id: UUID,
    amount: int,
    reason: str,
    issuer_id: Optional[UUID],
    event_type: CreditEventType,
    idempotency_key: Optional[str] = None,
) -> CreditTransaction:
    """Append a transaction and move the cached total by ``amount``.

    The caller owns the database transaction: nothing is committed here, so
    a failed append never leaves a half-updated total behind.
    """

    if amount == 0:
        raise LedgerRuleViolation("Credit amount must be non-zero.")
    reason = (reason or "").strip()
    if not reason:
        raise LedgerRuleViolation("Credit reason must not be empty.")

    _ensure_user(session, user_id)

    transaction = CreditTransaction(
        user_id=user_id,
        issuer_id=issuer_id,
        event_type=event_type,
        amount=amount,
        reason=reason,
        idempotency_key=idempotency_key,
    )
    session.add(transaction)
    try:
        session.flush()
    except IntegrityError as exc:
        if idempotency_key is None:
            raise
        # The session is unusable after a failed flush; the caller rolls back.
        raise DuplicateCreditError(user_id, idempotency_key) from exc

    _adjust_cached_total(session, user_id, amount)
    logger.info(
        "recorded %+d credits for %s (%s, key=%s)",
        amount,
        user_id,
        event_type.value,
        idempotency_key,
    )
    return transaction


def find_by_reason(session: Session, *, user_id: UUID, reason: str) -> Optional[CreditTransaction]:
    """Return the most recent transaction for ``user_id`` with this display reason."""

    stmt = (
        select(CreditTransaction)
        .where(CreditTransaction.user_id == user_id, CreditTransaction.reason == reason)
        .order_by(CreditTransaction.entry_id.desc())
        .limit(1)
    )
    return session.execute(stmt).scalar_one_or_none()


def find_by_key(session: Session, *, user_id: UUID, idempotency_key: str) -> Optional[CreditTransaction]:
    """Return the automatic credit recorded for this event instance, if any."""

    stmt = select(CreditTransaction).where(
        CreditTransaction.user_id == user_id,
        CreditTransaction.idempotency_key == idempotency_key,
    )
    return session.execute(stmt).scalar_one_or_none()


def _remove(session: Session, user_id: UUID, criteria) -> int:
    rows = session.execute(
        select(CreditTransaction.transaction_id, CreditTransaction.amount).where(
            CreditTransaction.user_id == user_id, *criteria
        )
    ).all()
    if not rows:
        return 0

    session.execute(
        delete(CreditTransaction)
        .where(CreditTransaction.transaction_id.in_([row.transaction_id for row in rows]))
        .execution_options(synchronize_session="fetch")
    )
    _adjust_cached_total(session, user_id, -sum(row.amount for row in rows))
    return len(rows)


def revoke(session: Session, *, user_id: UUID, reason: str) -> int:
    """Delete automatic credits with this display reason. Bonuses are never revoked here."""

    removed = _remove(
        session,
        user_id,
        [
            CreditTransaction.reason == reason,
            CreditTransaction.event_type != CreditEventType.BONUS,
        ],
    )
    if removed:
        logger.info("revoked %d transaction(s) for %s with reason %r", removed, user_id, reason)
    return removed


def revoke_by_key(session: Session, *, user_id: UUID, idempotency_key: str) -> int:
    """Delete the automatic credit recorded for this event instance."""

    removed = _remove(session, user_id, [CreditTransaction.idempotency_key == idempotency_key])
    if removed:
        logger.info("revoked credit %s for %s", idempotency_key, user_id)
    return removed


def history(
    session: Session,
    *,
    user_id: UUID,
    limit: int = 100,
    offset: int = 0,
) -> Sequence[CreditTransaction]:
    """Return a user's transactions newest first."""

    _ensure_user(session, user_id)

    stmt = (
        select(CreditTransaction)
        .options(joinedload(CreditTransaction.issuer))
        .where(CreditTransaction.user_id == user_id)
        .order_by(CreditTransaction.entry_id.desc())
        .offset(offset)
        .limit(limit)
    )
    return session.execute(stmt).scalars().all()


def ledger_total(session: Session, user_id: UUID) -> int:
    """Canonical balance: the sum of every ledger amount for the user."""

    stmt = select(func.coalesce(func.sum(CreditTransaction.amount), 0)).where(
        CreditTransaction.user_id == user_id
    )
    return int(session.execute(stmt).scalar_one())


def recompute_total(session: Session, user_id: UUID) -> bool:
    """Rewrite the cached total from the ledger. Returns True if it had drifted."""

    user = _ensure_user(session, user_id)
    actual = ledger_total(session, user_id)
    if user.total_credits == actual:
        return False

    logger.warning("cached total for %s drifted: %s != ledger %s", user_id, user.total_credits, actual)
    user.total_credits = actual
    user.updated_at = datetime.utcnow()
    session.flush()
    return True
