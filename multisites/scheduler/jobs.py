"""MultiSites - Scheduler Jobs.

APScheduler daily job that stores yesterday's all-sites report.
"""

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlmodel import Session

from multisites.archive.sql_reader import SqlArchiveReader
from multisites.config import settings
from multisites.database import engine
from multisites.models.archive_models import ReportSnapshot
from multisites.models.report_models import Caller
from multisites.reporting.pipeline import MultiSitesReporter
from multisites.sites.directory import SqlSiteDirectory
from multisites.sites.search import SqlSiteSearch
from multisites.core.logging import get_logger

logger = get_logger("scheduler")

scheduler = AsyncIOScheduler()


def store_snapshot(session: Session, date: str = "yesterday") -> ReportSnapshot:
    """Build the all-sites report as a scheduled task and persist it.

    The job runs with super user rights, restricted to the configured login.
    """
    reporter = MultiSitesReporter(
        archive_reader=SqlArchiveReader(session),
        site_directory=SqlSiteDirectory(session),
        site_search=SqlSiteSearch(session),
    )
    login = settings.scheduled_report_login
    report = reporter.get_all_sites_report(
        period=settings.scheduled_report_period,
        date=date,
        restrict_to_login=login,
        enhanced=settings.scheduled_report_enhanced,
        caller=Caller(login=login, is_super_user=True, is_scheduled_task=True),
    )

    snapshot = ReportSnapshot(
        period=settings.scheduled_report_period,
        date=date,
        restrict_to_login=login,
        result_json=report.model_dump_json(),
    )
    session.add(snapshot)
    session.commit()
    return snapshot


async def daily_snapshot_job():
    """Store the all-sites report for yesterday's data."""
    logger.info("Scheduled all-sites snapshot starting...")
    try:
        with Session(engine) as session:
            snapshot = store_snapshot(session)
            logger.info(f"Scheduled snapshot stored as id {snapshot.id}")
    except Exception as e:
        logger.error(f"Scheduled snapshot failed: {e}")


def start_scheduler():
    """Configure and start the scheduler."""
    if not settings.scheduler_enabled:
        logger.info("Scheduler disabled via config")
        return

    scheduler.add_job(
        daily_snapshot_job,
        "cron",
        hour=settings.report_hour,
        minute=0,
        id="daily_snapshot",
        replace_existing=True,
        misfire_grace_time=3600,
    )
    scheduler.start()
    logger.info(f"Scheduler started. Daily snapshot at {settings.report_hour}:00 UTC")


def stop_scheduler():
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
