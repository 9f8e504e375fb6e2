"""Discussion feed: posts and comments."""

from __future__ import annotations

from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload, selectinload

from ..core.context import Actor
from ..models import Comment, Post
from .course_service import get_course, is_enrolled


class FeedRuleViolation(Exception):
    """Raised when feed rules are violated."""

    def __init__(self, detail: str, status_code: int = 400) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


def _clean(content: str) -> str:
    content = (content or "").strip()
    if not content:
        raise FeedRuleViolation("Content must not be empty.")
    return content


def create_post(
    session: Session,
    *,
    actor: Actor,
    content: str,
    course_id: Optional[UUID] = None,
) -> Post:
    """Publish a post, globally or inside a course the author belongs to."""

    content = _clean(content)
    if course_id is not None:
        course = get_course(session, course_id)
        if not (actor.is_organizer or is_enrolled(session, course_id=course.course_id, user_id=actor.user_id)):
            raise FeedRuleViolation("Only course members can post in this course.", status_code=403)

    post = Post(author_id=actor.user_id, course_id=course_id, content=content)
    session.add(post)
    session.flush()
    return post


def get_post(session: Session, post_id: UUID) -> Post:
    post = session.get(Post, post_id)
    if post is None:
        raise FeedRuleViolation(f"Post {post_id} not found", status_code=404)
    return post


def create_comment(session: Session, *, actor: Actor, post_id: UUID, content: str) -> Comment:
    content = _clean(content)
    post = get_post(session, post_id)
    comment = Comment(post_id=post.post_id, author_id=actor.user_id, content=content)
    session.add(comment)
    session.flush()
    return comment


def list_posts(
    session: Session,
    *,
    course_id: Optional[UUID] = None,
    limit: int = 50,
    offset: int = 0,
) -> Sequence[Post]:
    """Return posts newest first, with authors and comments loaded."""

    stmt = (
        select(Post)
        .options(
            joinedload(Post.author),
            selectinload(Post.comments).joinedload(Comment.author),
        )
        .order_by(Post.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    if course_id is not None:
        stmt = stmt.where(Post.course_id == course_id)
    return session.execute(stmt).unique().scalars().all()
