"""
Writes a small synced tree (campaign -> ad set -> ad, insights, hourly, leads)
through the repositories.
"""
from datetime import date, datetime, timezone

from sqlalchemy import func, select

from adpulse.models import (
    Ad,
    AdDailyInsight,
    AdSet,
    AdSetDailyInsight,
    Campaign,
    CampaignDailyInsight,
    DailyInsight,
    HourlyStat,
    Lead,
)
from adpulse.repositories import (
    AdRepository,
    AdSetRepository,
    AnalyticsRepository,
    CampaignRepository,
    LeadRepository,
)

SYNCED_MODELS = (
    Campaign,
    AdSet,
    Ad,
    DailyInsight,
    CampaignDailyInsight,
    AdSetDailyInsight,
    AdDailyInsight,
    HourlyStat,
    Lead,
)


def metrics(spend, impressions, clicks, leads=0, revenue=0.0, conversions=0):
    return {
        "spend": spend,
        "impressions": impressions,
        "clicks": clicks,
        "leads": leads,
        "revenue": revenue,
        "conversions": conversions,
    }


async def seed_synced_tree(session_factory, business_id: str, days=(date(2024, 3, 10),), prefix: str = ""):
    """One campaign/ad set/ad per business; every day gets the same metrics"""
    campaign_id, adset_id, ad_id = f"{prefix}c1", f"{prefix}s1", f"{prefix}a1"

    async with session_factory() as session:
        await CampaignRepository(session).upsert(
            {"id": campaign_id, "business_id": business_id, "name": "Campaign 1", "status": "ACTIVE"}
        )
        await AdSetRepository(session).upsert(
            {"id": adset_id, "campaign_id": campaign_id, "name": "Set 1", "status": "ACTIVE"}
        )
        await AdRepository(session).upsert(
            {"id": ad_id, "ad_set_id": adset_id, "name": "Ad 1", "status": "PAUSED"}
        )

        analytics = AnalyticsRepository(session)
        for day in days:
            row = metrics(10.0, 1000, 20, leads=4, revenue=30.0, conversions=1)
            await analytics.upsert_daily_insight(business_id, day, row)
            await analytics.upsert_campaign_insight(campaign_id, day, row)
            await analytics.upsert_adset_insight(adset_id, day, row)
            await analytics.upsert_ad_insight(ad_id, day, row)
            await analytics.upsert_hourly_stats([
                {"business_id": business_id, "date": day, "hour": 9, "spend": 1.0,
                 "impressions": 10, "clicks": 1, "messaging_conversations": 3},
                {"business_id": business_id, "date": day, "hour": 21, "spend": 2.0,
                 "impressions": 20, "clicks": 2, "messaging_conversations": 5},
            ])

        await LeadRepository(session).upsert_many([
            {"id": f"{prefix}lead1", "business_id": business_id, "ad_id": ad_id,
             "created_time": datetime(2024, 3, 10, 9, 15, tzinfo=timezone.utc)},
            {"id": f"{prefix}lead2", "business_id": business_id, "ad_id": ad_id,
             "created_time": datetime(2024, 3, 10, 9, 45, tzinfo=timezone.utc)},
            {"id": f"{prefix}lead3", "business_id": business_id, "ad_id": ad_id,
             "created_time": datetime(2024, 3, 11, 22, 5, tzinfo=timezone.utc)},
        ])
        await session.commit()


async def count_rows(session_factory):
    """{table name: row count} for every synced table"""
    counts = {}
    async with session_factory() as session:
        for model in SYNCED_MODELS:
            counts[model.__tablename__] = await session.scalar(select(func.count()).select_from(model))
    return counts
