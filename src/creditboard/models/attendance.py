"""Lecture and attendance models."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from ..core.database import Base


class AttendanceStatus(str, enum.Enum):
    """Attendance outcome for one student at one lecture."""

    PRESENT = "present"
    ABSENT = "absent"


class Lecture(Base):
    """A scheduled session of a course."""

    __tablename__ = "lectures"

    lecture_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    course_id = Column(Uuid, ForeignKey("courses.course_id", ondelete="CASCADE"), nullable=False)
    title = Column(String, nullable=False)
    scheduled_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    course = relationship("Course", back_populates="lectures")
    attendance_records = relationship("AttendanceRecord", back_populates="lecture")


class AttendanceRecord(Base):
    """Attendance of one student at one lecture, maintained by organizers."""

    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("lecture_id", "student_id", name="attendance_records_unique"),
    )

    record_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    lecture_id = Column(Uuid, ForeignKey("lectures.lecture_id", ondelete="CASCADE"), nullable=False)
    student_id = Column(Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    organizer_id = Column(Uuid, ForeignKey("users.user_id", ondelete="SET NULL"))
    status = Column(
        Enum(AttendanceStatus, name="attendance_status", values_callable=lambda items: [i.value for i in items]),
        nullable=False,
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    lecture = relationship("Lecture", back_populates="attendance_records")
    student = relationship("User", foreign_keys=[student_id])
