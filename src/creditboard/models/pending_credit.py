"""Credit side effects parked for reconciliation."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, Integer, String, Uuid

from ..core.database import Base
from .credit_transaction import CreditEventType


class CreditAction(str, enum.Enum):
    """What a credit side effect does to the ledger."""

    GRANT = "GRANT"
    REVOKE = "REVOKE"
    REPLACE = "REPLACE"


class PendingCreditStatus(str, enum.Enum):
    """Reconciliation state of a parked side effect."""

    PENDING = "PENDING"
    RESOLVED = "RESOLVED"
    SUPERSEDED = "SUPERSEDED"
    FAILED = "FAILED"


class PendingCredit(Base):
    """A credit side effect that could not be applied when its action ran.

    Every effect for an event instance states its full target (granted,
    revoked, or the current grade), so at most one row per
    ``(user_id, idempotency_key)`` is PENDING: a newer effect for the same
    key marks older rows SUPERSEDED.
    """

    __tablename__ = "pending_credits"

    pending_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    action = Column(Enum(CreditAction, name="credit_action"), nullable=False)
    user_id = Column(Uuid, nullable=False, index=True)
    issuer_id = Column(Uuid)
    event_type = Column(Enum(CreditEventType, name="credit_event_type"), nullable=False)
    amount = Column(Integer, nullable=False, default=0)
    reason = Column(String, nullable=False)
    idempotency_key = Column(String)
    status = Column(
        Enum(PendingCreditStatus, name="pending_credit_status"),
        nullable=False,
        default=PendingCreditStatus.PENDING,
    )
    attempts = Column(Integer, nullable=False, default=0)
    last_error = Column(String)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
