"""
Hour-of-day distributions for the dashboard charts
"""
import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from adpulse.core.deps import get_db
from adpulse.repositories.reporting_repo import ReportingRepository, hour_of
from adpulse.schemas.reporting import HourBucket

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["Analytics"])


def _require_range(start: Optional[date], end: Optional[date]) -> None:
    if not start or not end:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Date range required",
        )


@router.get("/hourly-distribution", response_model=List[HourBucket])
async def hourly_distribution(
    start: Optional[date] = Query(None, alias="from"),
    end: Optional[date] = Query(None, alias="to"),
    business_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Messaging conversations per hour of day, summed over the range"""
    _require_range(start, end)

    totals = await ReportingRepository(db).messaging_by_hour(start, end, business_id=business_id)

    buckets = HourBucket.empty_day()
    for hour, count in totals.items():
        if 0 <= hour < 24:
            buckets[hour].count = count
    return buckets


@router.get("/leads-distribution", response_model=List[HourBucket])
async def leads_distribution(
    start: Optional[date] = Query(None, alias="from"),
    end: Optional[date] = Query(None, alias="to"),
    business_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Leads per UTC hour of their created_time"""
    _require_range(start, end)

    created_times = await ReportingRepository(db).lead_times(start, end, business_id=business_id)

    buckets = HourBucket.empty_day()
    for created in created_times:
        buckets[hour_of(created)].count += 1

    logger.debug(f"Lead distribution {start}..{end}: {len(created_times)} leads")
    return buckets
