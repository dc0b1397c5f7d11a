import logging
from datetime import timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from gastobot.services.draft_store import DraftStore

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "stale_drafts_sweep"


async def sweep_stale_drafts(store: DraftStore, ttl_minutes: int) -> int:
    """Удаляет брошенные черновики."""
    try:
        return store.evict_stale(timedelta(minutes=ttl_minutes))
    except Exception as e:
        logger.error(f"Failed to sweep stale drafts: {e}")
        return 0


def create_scheduler(store: DraftStore, ttl_minutes: int, interval_minutes: int) -> AsyncIOScheduler:
    """Планировщик с задачей очистки черновиков. ttl_minutes <= 0 отключает очистку."""
    scheduler = AsyncIOScheduler()

    if ttl_minutes > 0:
        scheduler.add_job(
            sweep_stale_drafts,
            IntervalTrigger(minutes=interval_minutes),
            args=[store, ttl_minutes],
            id=SWEEP_JOB_ID,
            replace_existing=True,
        )
    else:
        logger.info("Stale draft sweep disabled")

    return scheduler


def start_scheduler(scheduler: AsyncIOScheduler) -> None:
    scheduler.start()
    logger.info(f"Scheduler started with {len(scheduler.get_jobs())} jobs")


def stop_scheduler(scheduler: AsyncIOScheduler) -> None:
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler stopped")
