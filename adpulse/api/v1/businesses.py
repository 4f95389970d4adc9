"""
Business API endpoints (tracked ad accounts)
"""
import logging
from typing import Callable

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from adpulse.core.config import settings
from adpulse.core.deps import get_db, get_meta_api_factory, get_session_factory
from adpulse.repositories.business_repo import BusinessRepository
from adpulse.schemas.business import (
    AccountInfo,
    BusinessCreate,
    BusinessResponse,
    BusinessUpdate,
    TestConnectionRequest,
)
from adpulse.schemas.common import DataResponse, ListResponse, ResponseBase
from adpulse.services.meta.meta_api import MetaAPI, MetaAPIError
from adpulse.services.sync.backfill import backfill_business

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/businesses", tags=["Businesses"])


async def run_initial_backfill(session_factory: async_sessionmaker, business_id: str, days: int) -> None:
    """Background backfill for a newly registered business; errors are only logged"""
    try:
        await backfill_business(session_factory, business_id, days_back=days)
    except Exception as e:
        logger.error(f"Failed to backfill data for business {business_id}: {e}")


@router.get("", response_model=ListResponse[BusinessResponse])
async def list_businesses(db: AsyncSession = Depends(get_db)):
    """List businesses with masked tokens"""
    businesses = await BusinessRepository(db).list_all()
    return ListResponse(
        data=[BusinessResponse.model_validate(b) for b in businesses],
        total=len(businesses),
    )


@router.post("", response_model=DataResponse[BusinessResponse])
async def create_business(
    payload: BusinessCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """Register a business and backfill its recent history in the background"""
    repo = BusinessRepository(db)

    if await repo.get_by_ad_account_id(payload.ad_account_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Ad Account ID already exists",
        )

    business = await repo.create({
        "name": payload.name,
        "ad_account_id": payload.ad_account_id,
        "color_code": payload.color_code,
        "access_token": payload.access_token,
        "is_active": True,
    })
    await db.commit()
    await db.refresh(business)

    background_tasks.add_task(
        run_initial_backfill, session_factory, business.id, settings.BACKFILL_DEFAULT_DAYS
    )

    return DataResponse(data=BusinessResponse.model_validate(business), message="Business created")


@router.patch("/{business_id}", response_model=DataResponse[BusinessResponse])
async def update_business(
    business_id: str,
    payload: BusinessUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update name, color, active flag or token"""
    repo = BusinessRepository(db)
    business = await repo.get(business_id)
    if business is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Business not found")

    await repo.update(business, payload.model_dump(exclude_unset=True))
    await db.commit()
    await db.refresh(business)

    return DataResponse(data=BusinessResponse.model_validate(business), message="Business updated")


@router.delete("/{business_id}", response_model=ResponseBase)
async def delete_business(business_id: str, db: AsyncSession = Depends(get_db)):
    """Delete a business and everything synced for it"""
    repo = BusinessRepository(db)
    business = await repo.get(business_id)
    if business is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Business not found")

    await repo.delete(business.id)
    await db.commit()
    return ResponseBase(message="Business deleted")


@router.post("/test-connection", response_model=DataResponse[AccountInfo])
async def test_connection(
    payload: TestConnectionRequest,
    api_factory: Callable[[str], MetaAPI] = Depends(get_meta_api_factory),
):
    """Validate an ad account id + token pair against the Graph API"""
    api = api_factory(payload.access_token)
    try:
        info = await api.fetch_account_info(payload.ad_account_id)
    except MetaAPIError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    finally:
        await api.close()

    return DataResponse(
        data=AccountInfo(
            name=info.get("name"),
            currency=info.get("currency"),
            status=info.get("account_status"),
        )
    )
