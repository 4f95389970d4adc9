"""
Reporting repository
Read side of the synced data: entity listings with insight totals over a
date range, and hour-of-day distributions.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from adpulse.models.business import Business
from adpulse.models.campaign import Ad, AdSet, Campaign
from adpulse.models.insight import (
    AdDailyInsight,
    AdSetDailyInsight,
    CampaignDailyInsight,
    HourlyStat,
)
from adpulse.models.lead import Lead

TOTAL_COLUMNS = ("spend", "impressions", "clicks", "leads", "conversions", "revenue")


def _empty_totals() -> Dict[str, float]:
    return {column: 0 for column in TOTAL_COLUMNS}


def _date_filters(column, start: Optional[date], end: Optional[date]) -> list:
    filters = []
    if start:
        filters.append(column >= start)
    if end:
        filters.append(column <= end)
    return filters


class ReportingRepository:
    """Read-only queries; every method is a fixed number of statements"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _totals_by_owner(
        self,
        insight_model,
        owner_column,
        owner_ids: Iterable[str],
        start: Optional[date],
        end: Optional[date],
    ) -> Dict[str, Dict[str, float]]:
        """Summed insight columns per owner id, one GROUP BY query"""
        owner_ids = list(owner_ids)
        if not owner_ids:
            return {}

        sums = [
            func.coalesce(func.sum(getattr(insight_model, column)), 0).label(column)
            for column in TOTAL_COLUMNS
        ]
        result = await self.session.execute(
            select(owner_column, *sums)
            .where(owner_column.in_(owner_ids), *_date_filters(insight_model.date, start, end))
            .group_by(owner_column)
        )

        totals = {}
        for owner_id, spend, impressions, clicks, leads, conversions, revenue in result.all():
            totals[owner_id] = {
                "spend": float(spend),
                "impressions": int(impressions),
                "clicks": int(clicks),
                "leads": int(leads),
                "conversions": int(conversions),
                "revenue": float(revenue),
            }
        return totals

    async def campaigns_with_totals(
        self,
        business_id: Optional[str] = None,
        status: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[Tuple[Campaign, Business, Dict[str, float]]]:
        stmt = select(Campaign, Business).join(Business, Campaign.business_id == Business.id)
        if business_id:
            stmt = stmt.where(Campaign.business_id == business_id)
        if status:
            stmt = stmt.where(Campaign.status == status)
        stmt = stmt.order_by(Campaign.created_at.desc(), Campaign.id)

        rows = (await self.session.execute(stmt)).all()
        totals = await self._totals_by_owner(
            CampaignDailyInsight, CampaignDailyInsight.campaign_id, (c.id for c, _ in rows), start, end
        )
        return [(c, b, totals.get(c.id, _empty_totals())) for c, b in rows]

    async def adsets_with_totals(
        self,
        business_id: Optional[str] = None,
        campaign_id: Optional[str] = None,
        status: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[Tuple[AdSet, Campaign, Business, Dict[str, float]]]:
        stmt = (
            select(AdSet, Campaign, Business)
            .join(Campaign, AdSet.campaign_id == Campaign.id)
            .join(Business, Campaign.business_id == Business.id)
        )
        if business_id:
            stmt = stmt.where(Campaign.business_id == business_id)
        if campaign_id:
            stmt = stmt.where(AdSet.campaign_id == campaign_id)
        if status:
            stmt = stmt.where(AdSet.status == status)
        stmt = stmt.order_by(AdSet.created_at.desc(), AdSet.id)

        rows = (await self.session.execute(stmt)).all()
        totals = await self._totals_by_owner(
            AdSetDailyInsight, AdSetDailyInsight.ad_set_id, (s.id for s, _, _ in rows), start, end
        )
        return [(s, c, b, totals.get(s.id, _empty_totals())) for s, c, b in rows]

    async def ads_with_totals(
        self,
        business_id: Optional[str] = None,
        campaign_id: Optional[str] = None,
        ad_set_id: Optional[str] = None,
        status: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[Tuple[Ad, AdSet, Campaign, Dict[str, float]]]:
        stmt = (
            select(Ad, AdSet, Campaign)
            .join(AdSet, Ad.ad_set_id == AdSet.id)
            .join(Campaign, AdSet.campaign_id == Campaign.id)
        )
        if business_id:
            stmt = stmt.where(Campaign.business_id == business_id)
        if campaign_id:
            stmt = stmt.where(AdSet.campaign_id == campaign_id)
        if ad_set_id:
            stmt = stmt.where(Ad.ad_set_id == ad_set_id)
        if status:
            stmt = stmt.where(Ad.status == status)
        stmt = stmt.order_by(Ad.created_at.desc(), Ad.id)

        rows = (await self.session.execute(stmt)).all()
        totals = await self._totals_by_owner(
            AdDailyInsight, AdDailyInsight.ad_id, (a.id for a, _, _ in rows), start, end
        )
        return [(a, s, c, totals.get(a.id, _empty_totals())) for a, s, c in rows]

    async def messaging_by_hour(
        self,
        start: date,
        end: date,
        business_id: Optional[str] = None,
    ) -> Dict[int, int]:
        """{hour: summed messaging_conversations} over the inclusive date range"""
        stmt = (
            select(HourlyStat.hour, func.coalesce(func.sum(HourlyStat.messaging_conversations), 0))
            .where(*_date_filters(HourlyStat.date, start, end))
            .group_by(HourlyStat.hour)
        )
        if business_id:
            stmt = stmt.where(HourlyStat.business_id == business_id)

        result = await self.session.execute(stmt)
        return {hour: int(total) for hour, total in result.all()}

    async def lead_times(
        self,
        start: date,
        end: date,
        business_id: Optional[str] = None,
    ) -> List[datetime]:
        """created_time of leads from the start of `start` to the end of `end` (UTC)"""
        lower = datetime.combine(start, time.min, tzinfo=timezone.utc)
        upper = datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc)

        stmt = select(Lead.created_time).where(
            Lead.created_time.is_not(None),
            Lead.created_time >= lower,
            Lead.created_time < upper,
        )
        if business_id:
            stmt = stmt.where(Lead.business_id == business_id)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())


def hour_of(value: datetime) -> int:
    """UTC hour; naive values (SQLite) are already UTC"""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.hour