"""
Background task scheduler using APScheduler
"""
import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import async_sessionmaker

from adpulse.core.config import settings
from adpulse.core.database import AsyncSessionLocal
from adpulse.models.system import AUTO_SYNC_ENABLED_KEY
from adpulse.repositories.settings_repo import SettingsRepository
from adpulse.services.sync.data_sync import sync_daily_insights
from adpulse.services.sync.status import SyncStatusRegister, tracked_sync

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler: Optional[AsyncIOScheduler] = None


def start_scheduler():
    """Initialize and start the scheduler (needs a running event loop)"""
    global scheduler

    if scheduler is not None:
        return

    scheduler = AsyncIOScheduler()

    # ============================================
    # Auto Sync (every 6 hours: 00:00, 06:00, 12:00, 18:00)
    # ============================================
    scheduler.add_job(
        func=auto_sync_job,
        trigger=CronTrigger(hour=f"*/{settings.AUTO_SYNC_INTERVAL_HOURS}", minute=0),
        id="auto_sync",
        name="Sync today's insights for all active businesses",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    # ============================================
    # Sync Status Reconciliation (every minute)
    # ============================================
    scheduler.add_job(
        func=reconcile_sync_status_job,
        trigger=IntervalTrigger(seconds=settings.STATUS_RECONCILE_INTERVAL_SECONDS),
        id="reconcile_sync_status",
        name="Return finished sync status to idle, fail stale syncs",
        replace_existing=True,
    )

    scheduler.start()
    logger.info(f"Scheduler started with {len(scheduler.get_jobs())} jobs")


def stop_scheduler():
    """Stop the scheduler"""
    global scheduler

    if scheduler is not None:
        scheduler.shutdown(wait=False)
        scheduler = None
        logger.info("Scheduler stopped")


# ============================================
# Job Functions
# ============================================

async def is_auto_sync_enabled(session_factory: async_sessionmaker) -> bool:
    """auto_sync_enabled setting; enabled unless explicitly set to something other than "true" """
    async with session_factory() as session:
        value = await SettingsRepository(session).get(AUTO_SYNC_ENABLED_KEY)
    return value is None or value.lower() == "true"


async def auto_sync_job(session_factory: async_sessionmaker = AsyncSessionLocal):
    """Sync today for all active businesses, tracked in the status register"""
    logger.info("Running auto-sync job")

    if not await is_auto_sync_enabled(session_factory):
        logger.info("Auto sync is disabled, skipping")
        return

    try:
        async with tracked_sync(SyncStatusRegister(session_factory)):
            summary = await sync_daily_insights(session_factory)
        logger.info(f"Auto-sync completed: synced={summary.synced} failed={summary.failed}")
    except Exception as e:
        logger.error(f"Auto-sync failed: {e}")


async def reconcile_sync_status_job(session_factory: async_sessionmaker = AsyncSessionLocal):
    """Apply the status reconciliation rules"""
    try:
        await SyncStatusRegister(session_factory).reconcile()
    except Exception as e:
        logger.error(f"Sync status reconciliation failed: {e}")
