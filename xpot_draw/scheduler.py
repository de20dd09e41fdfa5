"""APScheduler job that fires due bonus drops."""

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger

from xpot_draw.config import settings
from xpot_draw.db.engine import async_session_factory

_scheduler: AsyncIOScheduler | None = None


async def _run_bonus_job():
    from xpot_draw.services.bonus_service import fire_due_bonuses

    async with async_session_factory() as session:
        try:
            await fire_due_bonuses(session)
            await session.commit()
        except Exception as e:
            logger.error("Scheduled bonus run failed: {}", e)
            await session.rollback()


def start_scheduler():
    """Start the interval job for bonus drops."""
    global _scheduler
    if _scheduler is not None:
        return

    _scheduler = AsyncIOScheduler()
    _scheduler.add_job(
        _run_bonus_job, "interval",
        seconds=settings.BONUS_RUN_INTERVAL_SECONDS,
        id="bonus_run",
        max_instances=1,
        coalesce=True,
    )
    _scheduler.start()
    logger.info("Scheduler started with {} jobs", len(_scheduler.get_jobs()))


def stop_scheduler():
    """Shutdown the scheduler."""
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        _scheduler = None
        logger.info("Scheduler stopped")


def get_scheduler_status() -> list[dict]:
    """Get status of all scheduled jobs."""
    if not _scheduler:
        return []

    jobs = []
    for job in _scheduler.get_jobs():
        jobs.append({
            "id": job.id,
            "next_run": str(job.next_run_time) if job.next_run_time else None,
            "trigger": str(job.trigger),
        })
    return jobs
