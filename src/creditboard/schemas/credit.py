"""Pydantic schemas for ledger endpoints."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models import CreditEventType
from .user import UserSummary


class CreditTransactionRead(BaseModel):
    """A single ledger row."""

    model_config = ConfigDict(from_attributes=True)

    transaction_id: UUID
    user_id: UUID
    amount: int
    reason: str
    event_type: CreditEventType
    issuer: Optional[UserSummary] = None
    created_at: datetime


class BonusAwardCreate(BaseModel):
    """Organizer-issued bonus credits."""

    user_id: UUID
    amount: int = Field(..., gt=0, description="Credits to award.")
    reason: str = Field(..., min_length=1, max_length=280)


class BonusAwardReceipt(BaseModel):
    """Response returned after awarding a bonus."""

    transaction: CreditTransactionRead
    total_credits: int = Field(..., description="Recipient's total after the award.")


class ReconciliationSummary(BaseModel):
    resolved: int
    failed: int
    still_pending: int
    totals_repaired: int
