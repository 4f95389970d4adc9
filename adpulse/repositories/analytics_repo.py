"""
Analytics repository
Daily insight rows at every grain plus hourly stats.

Every row is the platform's full total for its period, so on conflict
all metric columns are replaced with the incoming values, never summed.
"""
from datetime import date
from typing import Any, Dict, Iterable, List

from sqlalchemy.ext.asyncio import AsyncSession

from adpulse.models.insight import (
    AdDailyInsight,
    AdSetDailyInsight,
    CampaignDailyInsight,
    DailyInsight,
    HourlyStat,
)
from adpulse.repositories.base import BaseRepository

METRIC_COLUMNS = (
    "spend",
    "impressions",
    "clicks",
    "leads",
    "leads_whatsapp",
    "leads_instagram",
    "leads_messenger",
    "conversions",
    "revenue",
    "ctr",
    "cpm",
    "cpc",
    "cpl",
    "cvr",
    "roas",
)

ACCOUNT_ONLY_COLUMNS = ("reach", "frequency", "hook_rate", "hold_rate")

HOURLY_COLUMNS = ("spend", "impressions", "clicks", "messaging_conversations")


def _metric_values(data: Dict[str, Any], columns: Iterable[str]) -> Dict[str, Any]:
    # Missing metrics are written as 0 so a re-sync fully replaces the row
    return {column: data.get(column) or 0 for column in columns}


class _InsightWriter(BaseRepository):
    """Upsert for one insight table keyed on its natural unique tuple"""

    def __init__(self, session: AsyncSession, model, key_columns: Iterable[str], columns: Iterable[str]):
        super().__init__(session)
        self.model = model
        self.key_columns = tuple(key_columns)
        self.columns = tuple(columns)

    async def write(self, key: Dict[str, Any], data: Dict[str, Any]) -> None:
        values = {column: key[column] for column in self.key_columns}
        values.update(_metric_values(data, self.columns))
        await self._upsert(
            values,
            index_elements=self.key_columns,
            update_columns=self.columns,
        )


class AnalyticsRepository:
    """Writes insight rows; the caller's session holds the transaction"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._daily = _InsightWriter(
            session, DailyInsight, ("business_id", "date"), METRIC_COLUMNS + ACCOUNT_ONLY_COLUMNS
        )
        self._campaign = _InsightWriter(session, CampaignDailyInsight, ("campaign_id", "date"), METRIC_COLUMNS)
        self._adset = _InsightWriter(session, AdSetDailyInsight, ("ad_set_id", "date"), METRIC_COLUMNS)
        self._ad = _InsightWriter(session, AdDailyInsight, ("ad_id", "date"), METRIC_COLUMNS)
        self._hourly = _InsightWriter(session, HourlyStat, ("business_id", "date", "hour"), HOURLY_COLUMNS)

    async def upsert_daily_insight(self, business_id: str, day: date, data: Dict[str, Any]) -> None:
        await self._daily.write({"business_id": business_id, "date": day}, data)

    async def upsert_campaign_insight(self, campaign_id: str, day: date, data: Dict[str, Any]) -> None:
        await self._campaign.write({"campaign_id": campaign_id, "date": day}, data)

    async def upsert_adset_insight(self, ad_set_id: str, day: date, data: Dict[str, Any]) -> None:
        await self._adset.write({"ad_set_id": ad_set_id, "date": day}, data)

    async def upsert_ad_insight(self, ad_id: str, day: date, data: Dict[str, Any]) -> None:
        await self._ad.write({"ad_id": ad_id, "date": day}, data)

    async def upsert_hourly_stats(self, rows: List[Dict[str, Any]]) -> int:
        """
        Upsert hourly rows keyed on (business_id, date, hour).

        Each row: business_id, date, hour plus the hourly metric columns.
        """
        for row in rows:
            await self._hourly.write(row, row)
        return len(rows)
