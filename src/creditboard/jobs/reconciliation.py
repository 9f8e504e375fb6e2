"""Background scheduler for ledger reconciliation."""

from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI

from ..core.config import get_settings
from ..core.database import SessionLocal
from ..services.reconciliation_service import run_reconciliation

logger = logging.getLogger(__name__)

_scheduler = AsyncIOScheduler(timezone="UTC")


async def _execute_reconciliation() -> None:
    session = SessionLocal()
    try:
        summary = run_reconciliation(session)
        logger.info("ledger reconciliation completed: %s", summary)
    except Exception:  # pragma: no cover - safeguard for background job
        session.rollback()
        logger.exception("ledger reconciliation job failed")
    finally:
        session.close()


def register_scheduler(app: FastAPI) -> None:
    """Attach APScheduler lifecycle hooks to the FastAPI app."""

    settings = get_settings()
    if not settings.scheduler_enabled:
        logger.info("reconciliation scheduler disabled")
        return

    @app.on_event("startup")
    async def start_scheduler() -> None:
        if not _scheduler.running:
            _scheduler.add_job(
                _execute_reconciliation,
                "interval",
                minutes=settings.reconciliation_interval_minutes,
                id="ledger_reconciliation",
                replace_existing=True,
                coalesce=True,
                max_instances=1,
            )
            _scheduler.start()
            logger.info("reconciliation scheduler started")

    @app.on_event("shutdown")
    async def shutdown_scheduler() -> None:
        if _scheduler.running:
            _scheduler.shutdown(wait=False)
            logger.info("reconciliation scheduler stopped")
