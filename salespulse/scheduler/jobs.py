"""SalesPulse — Scheduler Jobs.

APScheduler nightly job that stores the current month's period reports for
every branch and for All.
"""

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlmodel import Session

from salespulse.config import settings
from salespulse.database import engine, record_store
from salespulse.analyzer.pipeline import resolve_period, run_period_reports
from salespulse.core.logging import get_logger, period_extra

logger = get_logger("scheduler")

scheduler = AsyncIOScheduler()


async def nightly_report_job():
    """Store this month's reports."""
    logger.info("Scheduled period reports starting...")
    month, year = resolve_period()
    try:
        with Session(engine) as session:
            results = run_period_reports(
                session, record_store, settings, month, year
            )
        logger.info(
            f"Scheduled reports complete: {len(results)} stored",
            extra=period_extra(month, year),
        )
    except Exception as e:
        logger.error(f"Scheduled reports failed: {e}")


def start_scheduler():
    """Configure and start the scheduler."""
    if not settings.scheduler_enabled:
        logger.info("Scheduler disabled via config")
        return

    scheduler.add_job(
        nightly_report_job,
        "cron",
        hour=settings.report_hour,
        minute=0,
        id="nightly_reports",
        replace_existing=True,
        misfire_grace_time=3600,
    )
    scheduler.start()
    logger.info(f"Scheduler started. Period reports at {settings.report_hour}:00 UTC")


def stop_scheduler():
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
