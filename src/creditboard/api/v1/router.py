"""Primary API router definition."""

from fastapi import APIRouter

from . import attendance, courses, feed, homework, leaderboard, ledger, materials, users

api_router = APIRouter()

api_router.include_router(users.router)
api_router.include_router(ledger.router)
api_router.include_router(courses.router)
api_router.include_router(materials.router)
api_router.include_router(attendance.router)
api_router.include_router(homework.router)
api_router.include_router(feed.router)
api_router.include_router(leaderboard.router)


@api_router.get("/health", tags=["health"])
async def healthcheck() -> dict[str, str]:
    """Basic health probe endpoint."""
    return {"status": "ok"}
