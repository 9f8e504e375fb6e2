"""User profile, promotion and credit history endpoints."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ...core.context import Actor
from ...core.database import get_db
from ...schemas import CreditTransactionRead, PromotionRequest, UserCreate, UserRead, UserUpdate
from ...services import ledger_service, user_service
from ...services.ledger_service import LedgerRuleViolation
from ...services.user_service import UserRuleViolation
from ..dependencies import get_actor

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user profile",
    responses={409: {"description": "Already registered"}},
)
def register_user(payload: UserCreate, db: Session = Depends(get_db)) -> UserRead:
    """Create the profile for an account the identity provider has just created.

    Example request body::

        {
            "user_id": "aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa",
            "display_name": "Alex Rao"
        }
    """

    try:
        user = user_service.register(
            db,
            user_id=payload.user_id,
            display_name=payload.display_name,
            bio=payload.bio,
            avatar_url=payload.avatar_url,
        )
        db.commit()
        db.refresh(user)
        return user
    except UserRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get("/me", response_model=UserRead, summary="Current user's profile")
def read_me(actor: Actor = Depends(get_actor), db: Session = Depends(get_db)) -> UserRead:
    return user_service.get_user(db, actor.user_id)


@router.patch("/me", response_model=UserRead, summary="Edit own profile")
def update_me(
    payload: UserUpdate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
) -> UserRead:
    try:
        user = user_service.update_profile(
            db,
            user_id=actor.user_id,
            display_name=payload.display_name,
            bio=payload.bio,
            avatar_url=payload.avatar_url,
        )
        db.commit()
        db.refresh(user)
        return user
    except UserRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get("/{user_id}", response_model=UserRead, summary="Public profile")
def read_user(user_id: UUID, db: Session = Depends(get_db)) -> UserRead:
    try:
        return user_service.get_user(db, user_id)
    except UserRuleViolation as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.post(
    "/{user_id}/promote",
    response_model=UserRead,
    summary="Promote a user to organizer",
    responses={401: {"description": "Invalid secret key"}, 404: {"description": "User not found"}},
)
def promote_user(user_id: UUID, payload: PromotionRequest, db: Session = Depends(get_db)) -> UserRead:
    """Grant the organizer role. The shared secret is the only authorization."""

    try:
        user = user_service.promote_to_organizer(db, user_id=user_id, secret_key=payload.secret_key)
        db.commit()
        db.refresh(user)
        return user
    except UserRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get(
    "/{user_id}/credits",
    response_model=List[CreditTransactionRead],
    summary="Credit history, newest first",
    responses={403: {"description": "Not your history"}},
)
def credit_history(
    user_id: UUID,
    limit: int = Query(100, ge=1, le=500, description="Maximum items to return"),
    offset: int = Query(0, ge=0, description="Items to skip for pagination"),
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
) -> List[CreditTransactionRead]:
    """Visible to the user themself and to organizers."""

    if actor.user_id != user_id and not actor.is_organizer:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Credit history is private")
    try:
        return list(ledger_service.history(db, user_id=user_id, limit=limit, offset=offset))
    except LedgerRuleViolation as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
