"""Feed endpoints. Posting and commenting earn engagement credit."""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ...core.context import Actor
from ...core.database import get_db
from ...schemas import CommentCreate, CommentReceipt, PostCreate, PostRead, PostReceipt
from ...services import crediting_service, feed_service
from ...services.course_service import CourseRuleViolation
from ...services.feed_service import FeedRuleViolation
from ..dependencies import get_actor

router = APIRouter(prefix="/posts", tags=["feed"])


@router.post("", response_model=PostReceipt, status_code=status.HTTP_201_CREATED, summary="Create a post")
def create_post(
    payload: PostCreate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
) -> PostReceipt:
    try:
        post = feed_service.create_post(db, actor=actor, content=payload.content, course_id=payload.course_id)
        db.commit()
    except (FeedRuleViolation, CourseRuleViolation) as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc

    outcome = crediting_service.run_credit_side_effect(db, crediting_service.post_effect(post))
    db.refresh(post)
    return PostReceipt(post=post, credit=outcome)


@router.get("", response_model=List[PostRead], summary="List posts, newest first")
def list_posts(
    course_id: Optional[UUID] = Query(None, description="Restrict to one course"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
) -> List[PostRead]:
    return list(feed_service.list_posts(db, course_id=course_id, limit=limit, offset=offset))


@router.post(
    "/{post_id}/comments",
    response_model=CommentReceipt,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a post",
)
def create_comment(
    post_id: UUID,
    payload: CommentCreate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
) -> CommentReceipt:
    try:
        comment = feed_service.create_comment(db, actor=actor, post_id=post_id, content=payload.content)
        db.commit()
    except FeedRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc

    outcome = crediting_service.run_credit_side_effect(db, crediting_service.comment_effect(comment))
    db.refresh(comment)
    return CommentReceipt(comment=comment, credit=outcome)
