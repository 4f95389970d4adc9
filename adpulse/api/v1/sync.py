"""
Sync API endpoints

Every sync runs inside the status register (syncing -> success/failed)
and under SYNC_TIMEOUT_SECONDS. On timeout the request returns 504;
upserts already committed are kept.
"""
import asyncio
import logging
from datetime import date
from typing import Any, Awaitable, Callable, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import async_sessionmaker

from adpulse.core.config import settings
from adpulse.core.deps import get_session_factory
from adpulse.schemas.common import DataResponse
from adpulse.schemas.sync import LeadSyncRequest, SyncStatusResponse
from adpulse.services.sync.backfill import (
    BackfillResult,
    BusinessNotFoundError,
    SmartSyncResult,
    backfill_business,
    smart_sync,
)
from adpulse.services.sync.data_sync import SyncRunSummary, sync_daily_insights
from adpulse.services.sync.lead_sync import LeadSyncSummary, sync_leads
from adpulse.services.sync.status import SyncStatusRegister, tracked_sync

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Sync"])


async def run_tracked(
    session_factory: async_sessionmaker,
    job: Callable[[], Awaitable[Any]],
    label: str,
) -> Any:
    """
    Run a sync job under the status register and the request timeout.

    `job` is called only once the register is marked syncing.
    """
    register = SyncStatusRegister(session_factory)
    try:
        async with tracked_sync(register):
            return await asyncio.wait_for(job(), timeout=settings.SYNC_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        logger.error(f"{label} timed out after {settings.SYNC_TIMEOUT_SECONDS}s")
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail=f"{label} timed out; partial results were kept",
        )
    except BusinessNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.error(f"{label} failed: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Sync failed")


@router.post("/sync", response_model=DataResponse[SyncRunSummary])
async def trigger_sync(
    target_date: Optional[date] = Query(None, alias="date", description="YYYY-MM-DD, defaults to today"),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """Sync all active businesses for one date"""
    summary = await run_tracked(
        session_factory, lambda: sync_daily_insights(session_factory, target_date), "Daily sync"
    )
    return DataResponse(
        data=summary,
        message=f"Sync completed for {summary.day}",
    )


@router.post("/sync/smart", response_model=DataResponse[SmartSyncResult])
async def trigger_smart_sync(
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """Sync the last few days one at a time"""
    result = await run_tracked(session_factory, lambda: smart_sync(session_factory), "Smart sync")
    return DataResponse(data=result, message=f"Smart sync completed ({len(result.days)} days)")


@router.post("/sync/businesses/{business_id}/backfill", response_model=DataResponse[BackfillResult])
async def trigger_backfill(
    business_id: str,
    days: int = Query(settings.BACKFILL_DEFAULT_DAYS, ge=1, le=365),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """Backfill account-level history for one business"""
    result = await run_tracked(
        session_factory, lambda: backfill_business(session_factory, business_id, days_back=days), "Backfill"
    )
    return DataResponse(
        data=result,
        message=f"Backfill completed for {result.business_name}",
    )


@router.post("/sync/leads", response_model=DataResponse[LeadSyncSummary])
async def trigger_lead_sync(
    payload: Optional[LeadSyncRequest] = None,
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """Sync lead-form submissions"""
    business_id = payload.business_id if payload else None
    result = await run_tracked(
        session_factory, lambda: sync_leads(session_factory, business_id=business_id), "Lead sync"
    )
    return DataResponse(data=result, message=f"Synced {result.total_leads} leads")


@router.get("/sync-status", response_model=SyncStatusResponse)
async def get_sync_status(
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """Current sync state and time of the last successful sync"""
    snapshot = await SyncStatusRegister(session_factory).read()
    return SyncStatusResponse(
        status=snapshot.state,
        last_sync_at=snapshot.last_sync_at,
        updated_at=snapshot.updated_at,
    )
