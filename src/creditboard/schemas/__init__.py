"""Public schema exports."""

from .attendance import (
	AttendanceCreditResult,
	AttendanceEntry,
	AttendanceReceipt,
	AttendanceRecordRead,
	AttendanceSave,
)
from .course import (
	AssignmentCreate,
	AssignmentRead,
	CourseCreate,
	CourseRead,
	EnrollmentRead,
	LectureCreate,
	LectureRead,
)
from .credit import BonusAwardCreate, BonusAwardReceipt, CreditTransactionRead, ReconciliationSummary
from .feed import CommentCreate, CommentRead, CommentReceipt, PostCreate, PostRead, PostReceipt
from .homework import GradeCreate, GradeReceipt, SubmissionCreate, SubmissionRead
from .leaderboard import LeaderboardEntry
from .material import MaterialCreate, MaterialRead, MaterialReceipt
from .user import PromotionRequest, UserCreate, UserRead, UserSummary, UserUpdate

__all__ = [
	"AssignmentCreate",
	"AssignmentRead",
	"AttendanceCreditResult",
	"AttendanceEntry",
	"AttendanceReceipt",
	"AttendanceRecordRead",
	"AttendanceSave",
	"BonusAwardCreate",
	"BonusAwardReceipt",
	"CommentCreate",
	"CommentRead",
	"CommentReceipt",
	"CourseCreate",
	"CourseRead",
	"CreditTransactionRead",
	"EnrollmentRead",
	"GradeCreate",
	"GradeReceipt",
	"LeaderboardEntry",
	"LectureCreate",
	"LectureRead",
	"MaterialCreate",
	"MaterialRead",
	"MaterialReceipt",
	"PostCreate",
	"PostRead",
	"PostReceipt",
	"PromotionRequest",
	"ReconciliationSummary",
	"SubmissionCreate",
	"SubmissionRead",
	"UserCreate",
	"UserRead",
	"UserSummary",
	"UserUpdate",
]
