"""Assignment and homework submission models."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from ..core.database import Base


class Assignment(Base):
    """Homework assignment published in a course."""

    __tablename__ = "assignments"

    assignment_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    course_id = Column(Uuid, ForeignKey("courses.course_id", ondelete="CASCADE"), nullable=False)
    title = Column(String, nullable=False)
    description = Column(String)
    due_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    course = relationship("Course", back_populates="assignments")
    submissions = relationship("HomeworkSubmission", back_populates="assignment")


class HomeworkSubmission(Base):
    """A student's single submission for an assignment; may be graded repeatedly."""

    __tablename__ = "homework_submissions"
    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="homework_submissions_unique"),
        CheckConstraint("grade IS NULL OR (grade >= 0 AND grade <= 20)", name="homework_submissions_grade_range"),
        CheckConstraint("content IS NOT NULL OR file_url IS NOT NULL", name="homework_submissions_has_body"),
    )

    submission_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    assignment_id = Column(
        Uuid, ForeignKey("assignments.assignment_id", ondelete="CASCADE"), nullable=False
    )
    student_id = Column(Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    content = Column(String)
    file_url = Column(String)
    grade = Column(Integer)
    feedback = Column(String)
    graded_by = Column(Uuid, ForeignKey("users.user_id", ondelete="SET NULL"))
    graded_at = Column(DateTime)
    submitted_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    assignment = relationship("Assignment", back_populates="submissions")
    student = relationship("User", foreign_keys=[student_id])
