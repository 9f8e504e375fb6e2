"""Organizer ledger operations: bonus awards and reconciliation."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...core.context import Actor
from ...core.database import get_db
from ...schemas import BonusAwardCreate, BonusAwardReceipt, ReconciliationSummary
from ...services import crediting_service, reconciliation_service
from ...services.ledger_service import LedgerRuleViolation
from ..dependencies import require_organizer

router = APIRouter(prefix="/ledger", tags=["ledger"])


@router.post(
    "/bonuses",
    response_model=BonusAwardReceipt,
    status_code=status.HTTP_201_CREATED,
    summary="Award bonus credits",
    responses={
        201: {
            "description": "Bonus recorded",
            "content": {
                "application/json": {
                    "example": {
                        "transaction": {
                            "transaction_id": "77777777-7777-7777-7777-777777777777",
                            "user_id": "bbbbbbbb-bbbb-bbbb-bbbb-bbbbbbbbbbbb",
                            "amount": 15,
                            "reason": "helpful peer",
                            "event_type": "BONUS",
                            "issuer": {
                                "user_id": "aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa",
                                "display_name": "Alex Rao",
                                "avatar_url": None,
                            },
                            "created_at": "2025-11-12T14:30:00",
                        },
                        "total_credits": 23,
                    }
                }
            },
        },
        400: {"description": "Invalid amount or reason"},
        403: {"description": "Organizer role required"},
        404: {"description": "User not found"},
    },
)
def award_bonus(
    payload: BonusAwardCreate,
    actor: Actor = Depends(require_organizer),
    db: Session = Depends(get_db),
) -> BonusAwardReceipt:
    """Example request body::

        {
            "user_id": "bbbbbbbb-bbbb-bbbb-bbbb-bbbbbbbbbbbb",
            "amount": 15,
            "reason": "helpful peer"
        }
    """

    try:
        transaction = crediting_service.award_bonus(
            db,
            actor=actor,
            user_id=payload.user_id,
            amount=payload.amount,
            reason=payload.reason,
        )
        db.commit()
        db.refresh(transaction)
        return BonusAwardReceipt(transaction=transaction, total_credits=transaction.user.total_credits)
    except LedgerRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.post(
    "/reconcile",
    response_model=ReconciliationSummary,
    summary="Replay parked credits and repair cached totals",
)
def reconcile(
    actor: Actor = Depends(require_organizer),
    db: Session = Depends(get_db),
) -> ReconciliationSummary:
    return ReconciliationSummary(**reconciliation_service.run_reconciliation(db))
