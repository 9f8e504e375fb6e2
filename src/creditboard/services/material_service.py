"""Shared course materials."""

from __future__ import annotations

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.context import Actor
from ..models import Material
from .course_service import get_course, is_enrolled


class MaterialRuleViolation(Exception):
    """Raised when material rules are violated."""

    def __init__(self, detail: str, status_code: int = 400) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


def share_material(
    session: Session,
    *,
    actor: Actor,
    course_id: UUID,
    section: str,
    title: str,
    url: str,
) -> Material:
    """Register an uploaded file. Uploads by non-organizers count as student contributions."""

    course = get_course(session, course_id)
    if not (actor.is_organizer or is_enrolled(session, course_id=course.course_id, user_id=actor.user_id)):
        raise MaterialRuleViolation("Only course members can share materials.", status_code=403)
    if not section.strip() or not title.strip():
        raise MaterialRuleViolation("Section and title are required.")

    material = Material(
        course_id=course.course_id,
        uploader_id=actor.user_id,
        section=section.strip(),
        title=title.strip(),
        url=url,
        is_student_contribution=not actor.is_organizer,
    )
    session.add(material)
    session.flush()
    return material


def list_materials(session: Session, *, course_id: UUID) -> Sequence[Material]:
    get_course(session, course_id)
    stmt = (
        select(Material)
        .where(Material.course_id == course_id)
        .order_by(Material.section.asc(), Material.created_at.desc())
    )
    return session.execute(stmt).scalars().all()
