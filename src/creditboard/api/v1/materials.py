"""Shared material endpoints."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...core.context import Actor
from ...core.database import get_db
from ...schemas import MaterialCreate, MaterialRead, MaterialReceipt
from ...services import crediting_service, material_service
from ...services.course_service import CourseRuleViolation
from ...services.material_service import MaterialRuleViolation
from ..dependencies import get_actor

router = APIRouter(prefix="/courses/{course_id}/materials", tags=["materials"])


@router.post("", response_model=MaterialReceipt, status_code=status.HTTP_201_CREATED, summary="Share a material")
def share_material(
    course_id: UUID,
    payload: MaterialCreate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
) -> MaterialReceipt:
    try:
        material = material_service.share_material(
            db,
            actor=actor,
            course_id=course_id,
            section=payload.section,
            title=payload.title,
            url=payload.url,
        )
        db.commit()
    except (MaterialRuleViolation, CourseRuleViolation) as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc

    outcome = crediting_service.run_credit_side_effect(db, crediting_service.material_effect(material))
    db.refresh(material)
    return MaterialReceipt(material=material, credit=outcome)


@router.get("", response_model=List[MaterialRead], summary="List materials")
def list_materials(course_id: UUID, db: Session = Depends(get_db)) -> List[MaterialRead]:
    try:
        return list(material_service.list_materials(db, course_id=course_id))
    except CourseRuleViolation as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
