"""Course and enrollment models."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from ..core.database import Base


class Course(Base):
    """A course run by an organizer."""

    __tablename__ = "courses"

    course_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String, nullable=False)
    description = Column(String)
    created_by = Column(Uuid, ForeignKey("users.user_id", ondelete="RESTRICT"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    enrollments = relationship("Enrollment", back_populates="course")
    lectures = relationship("Lecture", back_populates="course", order_by="Lecture.scheduled_at")
    assignments = relationship("Assignment", back_populates="course")


class Enrollment(Base):
    """Membership of a user in a course."""

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("course_id", "user_id", name="enrollments_unique"),
    )

    enrollment_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    course_id = Column(Uuid, ForeignKey("courses.course_id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    course = relationship("Course", back_populates="enrollments")
    user = relationship("User", back_populates="enrollments")
