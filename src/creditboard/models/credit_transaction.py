"""Credit ledger model capturing every grant and deduction."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from ..core.database import Base


class CreditEventType(str, enum.Enum):
    """Ledger event classification."""

    POST = "POST"
    COMMENT = "COMMENT"
    ATTENDANCE = "ATTENDANCE"
    MATERIAL_SHARE = "MATERIAL_SHARE"
    HOMEWORK_GRADE = "HOMEWORK_GRADE"
    BONUS = "BONUS"


class CreditTransaction(Base):
    """Append-only ledger row. Retraction deletes the row, nothing updates it.

    ``idempotency_key`` identifies the event instance behind an automatic
    credit (``attendance:<lecture_id>`` and so on); ``reason`` is display text
    only. Manual bonuses have no key, and NULL keys never collide.
    """

    __tablename__ = "credit_transactions"
    __table_args__ = (
        UniqueConstraint("user_id", "idempotency_key", name="credit_transactions_idempotency_unique"),
        CheckConstraint("amount <> 0", name="credit_transactions_amount_nonzero"),
        CheckConstraint("length(reason) > 0", name="credit_transactions_reason_present"),
    )

    entry_id = Column(Integer, primary_key=True, autoincrement=True)
    transaction_id = Column(Uuid, unique=True, nullable=False, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.user_id", ondelete="RESTRICT"), nullable=False, index=True)
    issuer_id = Column(Uuid, ForeignKey("users.user_id", ondelete="SET NULL"))
    event_type = Column(Enum(CreditEventType, name="credit_event_type"), nullable=False)
    amount = Column(Integer, nullable=False)
    reason = Column(String, nullable=False)
    idempotency_key = Column(String)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", foreign_keys=[user_id], back_populates="credit_transactions")
    issuer = relationship("User", foreign_keys=[issuer_id])
