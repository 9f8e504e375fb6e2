"""Discussion feed models."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from ..core.database import Base


class Post(Base):
    """A feed post, either global or scoped to a course."""

    __tablename__ = "posts"

    post_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    author_id = Column(Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    course_id = Column(Uuid, ForeignKey("courses.course_id", ondelete="CASCADE"))
    content = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    author = relationship("User")
    course = relationship("Course")
    comments = relationship("Comment", back_populates="post", order_by="Comment.created_at")


class Comment(Base):
    """Reply to a post."""

    __tablename__ = "comments"

    comment_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    post_id = Column(Uuid, ForeignKey("posts.post_id", ondelete="CASCADE"), nullable=False)
    author_id = Column(Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    content = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    post = relationship("Post", back_populates="comments")
    author = relationship("User")
