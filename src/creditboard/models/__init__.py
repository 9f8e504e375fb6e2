"""SQLAlchemy models for Creditboard."""

from .attendance import AttendanceRecord, AttendanceStatus, Lecture
from .course import Course, Enrollment
from .credit_transaction import CreditEventType, CreditTransaction
from .feed import Comment, Post
from .homework import Assignment, HomeworkSubmission
from .material import Material
from .pending_credit import CreditAction, PendingCredit, PendingCreditStatus
from .user import User, UserRole

__all__ = [
    "Assignment",
    "AttendanceRecord",
    "AttendanceStatus",
    "Comment",
    "Course",
    "CreditAction",
    "CreditEventType",
    "CreditTransaction",
    "Enrollment",
    "HomeworkSubmission",
    "Lecture",
    "Material",
    "PendingCredit",
    "PendingCreditStatus",
    "Post",
    "User",
    "UserRole",
]
