"""User domain model."""

import enum
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, Integer, String, Uuid
from sqlalchemy.orm import relationship

from ..core.database import Base


class UserRole(str, enum.Enum):
    """Platform roles. Promotion is one-way from STUDENT to ORGANIZER."""

    STUDENT = "student"
    ORGANIZER = "organizer"


class User(Base):
    """Represents a community member.

    ``user_id`` is issued by the external identity provider. ``total_credits``
    is a cache of the ledger sum and can always be recomputed from
    ``credit_transactions``.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("length(display_name) > 0", name="users_display_name_present"),
    )

    user_id = Column(Uuid, primary_key=True)
    display_name = Column(String, nullable=False)
    bio = Column(String)
    avatar_url = Column(String)
    role = Column(
        Enum(UserRole, name="user_role", values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=UserRole.STUDENT,
    )
    total_credits = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    credit_transactions = relationship(
        "CreditTransaction",
        foreign_keys="CreditTransaction.user_id",
        back_populates="user",
    )
    enrollments = relationship("Enrollment", back_populates="user")
