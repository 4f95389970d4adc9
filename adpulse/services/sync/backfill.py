"""
Backfill drivers

- backfill_business: account-level history for one business, a bounded
  number of dates in flight at once
- smart_sync: full pipeline for all businesses over the last few days,
  one day at a time, backing off when the platform rate-limits us
"""
import asyncio
import logging
from datetime import date, timedelta
from typing import Awaitable, Callable, List, Optional

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import async_sessionmaker

from adpulse.core.config import settings
from adpulse.models.business import Business
from adpulse.repositories.business_repo import BusinessRepository
from adpulse.services.meta.meta_api import is_rate_limit_message
from adpulse.services.sync.data_sync import (
    ACCOUNT_ONLY,
    BusinessSyncResult,
    DataSyncService,
    SyncRunSummary,
    sync_daily_insights,
)

logger = logging.getLogger(__name__)

Syncer = Callable[[Business, date], Awaitable[BusinessSyncResult]]


class BusinessNotFoundError(Exception):
    """No business with the requested id"""

    def __init__(self, business_id: str):
        super().__init__(f"Business with ID {business_id} not found")
        self.business_id = business_id


class BackfillResult(BaseModel):
    business_id: str
    business_name: str
    synced: int = 0
    failed: int = 0


class SmartSyncDay(BaseModel):
    day: date
    synced: int = 0
    failed: int = 0
    skipped: int = 0
    rate_limited: bool = False
    error: Optional[str] = None


class SmartSyncResult(BaseModel):
    days: List[SmartSyncDay] = []

    @property
    def synced(self) -> int:
        return sum(d.synced for d in self.days)

    @property
    def failed(self) -> int:
        return sum(d.failed for d in self.days)


def past_days(days_back: int, today: Optional[date] = None) -> List[date]:
    """The N calendar days before today, most recent first"""
    today = today or date.today()
    return [today - timedelta(days=i) for i in range(1, days_back + 1)]


# ========================================
# Per-business backfill
# ========================================

async def backfill_business(
    session_factory: async_sessionmaker,
    business_id: str,
    days_back: Optional[int] = None,
    concurrency: Optional[int] = None,
    syncer: Optional[Syncer] = None,
) -> BackfillResult:
    """
    Backfill account-level daily rows for one business.

    Each date is independent: an exception, a failed phase or a day
    without data counts as failed and never aborts the batch.

    Raises:
        BusinessNotFoundError: unknown business id
    """
    days_back = days_back or settings.BACKFILL_DEFAULT_DAYS
    concurrency = concurrency or settings.BACKFILL_CONCURRENCY

    async with session_factory() as session:
        business = await BusinessRepository(session).get(business_id)
    if business is None:
        raise BusinessNotFoundError(business_id)

    if syncer is None:
        service = DataSyncService(session_factory)

        async def syncer(b: Business, d: date) -> BusinessSyncResult:
            return await service.sync_business(b, d, ACCOUNT_ONLY)

    logger.info(f"Backfilling {days_back} days for {business.name} ({business.ad_account_id})")

    result = BackfillResult(business_id=business.id, business_name=business.name)
    semaphore = asyncio.Semaphore(concurrency)

    async def worker(day: date) -> None:
        async with semaphore:
            if not business.access_token:
                logger.warning(f"  Skipping {day}: no access token")
                result.failed += 1
                return
            try:
                outcome = await syncer(business, day)
            except Exception as e:
                logger.error(f"  Failed to sync {day}: {e}")
                result.failed += 1
                return

            if not outcome.success:
                logger.error(f"  Failed to sync {day}: {outcome.phases_failed}")
                result.failed += 1
            elif not outcome.counts.get("account_insights"):
                logger.warning(f"  No insights found for {day}")
                result.failed += 1
            else:
                result.synced += 1

    await asyncio.gather(*(worker(day) for day in past_days(days_back)))

    logger.info(
        f"Completed backfill for {business.name}: "
        f"{result.synced} synced, {result.failed} failed"
    )
    return result


# ========================================
# Smart sync
# ========================================

async def smart_sync(
    session_factory: async_sessionmaker,
    days: Optional[int] = None,
    delay: Optional[float] = None,
    rate_limit_backoff: Optional[float] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    service: Optional[DataSyncService] = None,
    today: Optional[date] = None,
) -> SmartSyncResult:
    """
    Full pipeline for every active business over the last `days` days,
    today first, strictly one day at a time.

    Sleeps `delay` between days, or `rate_limit_backoff` after a day that
    hit the platform's rate limit.
    """
    days = days or settings.SMART_SYNC_DAYS
    delay = settings.SMART_SYNC_DELAY_SECONDS if delay is None else delay
    if rate_limit_backoff is None:
        rate_limit_backoff = settings.RATE_LIMIT_BACKOFF_SECONDS

    today = today or date.today()
    targets = [today - timedelta(days=i) for i in range(days)]
    result = SmartSyncResult()

    logger.info(f"Starting smart sync (last {days} days)")

    for index, day in enumerate(targets):
        entry = SmartSyncDay(day=day)
        try:
            summary: SyncRunSummary = await sync_daily_insights(session_factory, day, service=service)
            entry.synced = summary.synced
            entry.failed = summary.failed
            entry.skipped = summary.skipped
            entry.rate_limited = summary.rate_limited
        except Exception as e:
            logger.error(f"  Smart sync failed for {day}: {e}")
            entry.error = str(e)
            entry.rate_limited = is_rate_limit_message(str(e))

        result.days.append(entry)

        if index == len(targets) - 1:
            break

        if entry.rate_limited:
            logger.warning(f"  Rate limit hit on {day}, backing off {rate_limit_backoff}s")
            await sleep(rate_limit_backoff)
        else:
            await sleep(delay)

    logger.info(f"Smart sync completed: {result.synced} synced, {result.failed} failed")
    return result
