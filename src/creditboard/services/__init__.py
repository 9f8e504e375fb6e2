"""Service layer exports."""

from . import (
	attendance_service,
	course_service,
	crediting_service,
	feed_service,
	homework_service,
	leaderboard_service,
	ledger_service,
	material_service,
	reconciliation_service,
	user_service,
)

__all__ = [
	"attendance_service",
	"course_service",
	"crediting_service",
	"feed_service",
	"homework_service",
	"leaderboard_service",
	"ledger_service",
	"material_service",
	"reconciliation_service",
	"user_service",
]
