"""
Campaign, ad set and ad listings with insights aggregated over a date range
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from adpulse.core.deps import get_db
from adpulse.repositories.reporting_repo import ReportingRepository
from adpulse.schemas.common import ListResponse
from adpulse.schemas.reporting import AdReport, AdSetReport, CampaignReport, MetricTotals

router = APIRouter(tags=["Campaigns"])


@router.get("/campaigns", response_model=ListResponse[CampaignReport])
async def list_campaigns(
    business_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None, description="YYYY-MM-DD, inclusive"),
    end_date: Optional[date] = Query(None, description="YYYY-MM-DD, inclusive"),
    db: AsyncSession = Depends(get_db),
):
    """Campaigns, newest first; totals cover only insight days inside the range"""
    rows = await ReportingRepository(db).campaigns_with_totals(
        business_id=business_id, status=status, start=start_date, end=end_date
    )
    data = [
        CampaignReport(
            id=campaign.id,
            business_id=campaign.business_id,
            business_name=business.name,
            business_color=business.color_code,
            name=campaign.name,
            objective=campaign.objective,
            status=campaign.status,
            created_at=campaign.created_at,
            aggregate=MetricTotals.from_sums(sums),
        )
        for campaign, business, sums in rows
    ]
    return ListResponse(data=data, total=len(data))


@router.get("/adsets", response_model=ListResponse[AdSetReport])
async def list_adsets(
    business_id: Optional[str] = Query(None),
    campaign_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    rows = await ReportingRepository(db).adsets_with_totals(
        business_id=business_id, campaign_id=campaign_id, status=status, start=start_date, end=end_date
    )
    data = [
        AdSetReport(
            id=ad_set.id,
            campaign_id=campaign.id,
            campaign_name=campaign.name,
            business_id=business.id,
            business_name=business.name,
            business_color=business.color_code,
            name=ad_set.name,
            status=ad_set.status,
            created_at=ad_set.created_at,
            aggregate=MetricTotals.from_sums(sums),
        )
        for ad_set, campaign, business, sums in rows
    ]
    return ListResponse(data=data, total=len(data))


@router.get("/ads", response_model=ListResponse[AdReport])
async def list_ads(
    business_id: Optional[str] = Query(None),
    campaign_id: Optional[str] = Query(None),
    ad_set_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    rows = await ReportingRepository(db).ads_with_totals(
        business_id=business_id,
        campaign_id=campaign_id,
        ad_set_id=ad_set_id,
        status=status,
        start=start_date,
        end=end_date,
    )
    data = [
        AdReport(
            id=ad.id,
            ad_set_id=ad_set.id,
            ad_set_name=ad_set.name,
            campaign_id=campaign.id,
            campaign_name=campaign.name,
            business_id=campaign.business_id,
            name=ad.name,
            status=ad.status,
            creative_url=ad.creative_url,
            thumbnail_url=ad.thumbnail_url,
            creative_type=ad.creative_type,
            creative_body=ad.creative_body,
            creative_title=ad.creative_title,
            created_at=ad.created_at,
            aggregate=MetricTotals.from_sums(sums),
        )
        for ad, ad_set, campaign, sums in rows
    ]
    return ListResponse(data=data, total=len(data))
