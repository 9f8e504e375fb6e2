"""Course material model. Files live in external object storage."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from ..core.database import Base


class Material(Base):
    __tablename__ = "materials"

    material_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    course_id = Column(Uuid, ForeignKey("courses.course_id", ondelete="CASCADE"), nullable=False)
    uploader_id = Column(Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    section = Column(String, nullable=False)
    title = Column(String, nullable=False)
    url = Column(String, nullable=False)
    is_student_contribution = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    course = relationship("Course")
    uploader = relationship("User")
