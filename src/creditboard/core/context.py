"""Explicit caller context passed into service calls."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from ..models import UserRole


@dataclass(frozen=True)
class Actor:
    """The authenticated user on whose behalf a call runs."""

    user_id: UUID
    role: UserRole

    @property
    def is_organizer(self) -> bool:
        return self.role == UserRole.ORGANIZER
