"""
Data Sync Service
Pulls one day of Meta insights for a business and writes them through
the repositories.

Pipeline per business-day, strictly in order:
    ACCOUNT -> CAMPAIGN -> ADSET -> AD -> HOURLY

Each phase is isolated: a failure is logged and recorded on the result
and the next phase still runs. Entity phases reconcile identities to
completion first, then persist insights for ids that exist locally.
"""
import asyncio
import enum
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple, Type

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import async_sessionmaker

from adpulse.core.config import settings
from adpulse.models.business import Business
from adpulse.models.enums import InsightLevel
from adpulse.repositories.ad_repo import AdRepository
from adpulse.repositories.adset_repo import AdSetRepository
from adpulse.repositories.analytics_repo import AnalyticsRepository
from adpulse.repositories.base import BaseRepository
from adpulse.repositories.business_repo import BusinessRepository
from adpulse.repositories.campaign_repo import CampaignRepository
from adpulse.services.analytics.breakdowns import (
    ACCOUNT_KEY,
    LEVEL_ID_FIELDS,
    LeadBreakdown,
    compute_lead_breakdowns,
)
from adpulse.services.analytics.metric_calculator import (
    parse_metrics,
    parse_video_metrics,
    to_float,
    to_int,
)
from adpulse.services.meta.creative import resolve_creative
from adpulse.services.meta.meta_api import (
    HOURLY_BREAKDOWN,
    MetaAPI,
    MetaRateLimitError,
    is_rate_limit_message,
)

logger = logging.getLogger(__name__)

MESSAGING_WELCOME_ACTION = "onsite_conversion.messaging_welcome_message_view"


class SyncPhase(str, enum.Enum):
    ACCOUNT = "account"
    CAMPAIGN = "campaign"
    ADSET = "adset"
    AD = "ad"
    HOURLY = "hourly"


FULL_PIPELINE: Tuple[SyncPhase, ...] = (
    SyncPhase.ACCOUNT,
    SyncPhase.CAMPAIGN,
    SyncPhase.ADSET,
    SyncPhase.AD,
    SyncPhase.HOURLY,
)

ACCOUNT_ONLY: Tuple[SyncPhase, ...] = (SyncPhase.ACCOUNT,)


# ========================================
# Results
# ========================================

class BusinessSyncResult(BaseModel):
    """Outcome of one business-day sync"""

    business_id: str
    business_name: str
    day: date
    skipped: bool = False
    rate_limited: bool = False
    phases_completed: List[SyncPhase] = []
    # phase value -> error message
    phases_failed: Dict[str, str] = {}
    # e.g. {"campaigns": 12, "campaign_insights": 10}
    counts: Dict[str, int] = {}
    # Insight rows / entities dropped for a missing id or unknown parent
    skipped_rows: int = 0

    @property
    def success(self) -> bool:
        return not self.skipped and not self.phases_failed

    def add(self, key: str, amount: int = 1) -> None:
        self.counts[key] = self.counts.get(key, 0) + amount


class SyncRunSummary(BaseModel):
    """Outcome of syncing every active business for one date"""

    day: date
    synced: int = 0
    failed: int = 0
    skipped: int = 0
    results: List[BusinessSyncResult] = []

    @property
    def rate_limited(self) -> bool:
        return any(r.rate_limited for r in self.results)


@dataclass
class _PhaseContext:
    business_id: str
    ad_account_id: str
    day: date
    api: Any
    result: BusinessSyncResult

    @property
    def date_str(self) -> str:
        return self.day.isoformat()


# ========================================
# Row builders
# ========================================

def insight_row(insight: Dict[str, Any], breakdown: Optional[LeadBreakdown] = None) -> Dict[str, Any]:
    """Metric columns for a campaign / ad set / ad insight row"""
    breakdown = breakdown or LeadBreakdown()
    row = parse_metrics(insight).model_dump()
    row.update(
        leads_whatsapp=breakdown.whatsapp,
        leads_instagram=breakdown.instagram,
        leads_messenger=breakdown.messenger,
    )
    return row


def account_row(insight: Dict[str, Any], breakdown: Optional[LeadBreakdown] = None) -> Dict[str, Any]:
    """Business-day row: shared metrics plus reach, frequency and video rates"""
    row = insight_row(insight, breakdown)
    row.update(
        reach=to_int(insight.get("reach")),
        frequency=to_float(insight.get("frequency")),
    )
    row.update(parse_video_metrics(insight, row["impressions"]).model_dump())
    return row


def parse_hour(value: Optional[str]) -> Optional[int]:
    """Hour from a "HH:MM:SS - HH:MM:SS" breakdown value"""
    if not value:
        return None
    try:
        hour = int(str(value).split(":")[0])
    except ValueError:
        return None
    return hour if 0 <= hour <= 23 else None


def hourly_row(business_id: str, day: date, record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    hour = parse_hour(record.get(HOURLY_BREAKDOWN))
    if hour is None:
        return None

    row_day = day
    if record.get("date_start"):
        try:
            row_day = date.fromisoformat(record["date_start"])
        except ValueError:
            pass

    messaging = 0
    for action in record.get("actions") or []:
        if action.get("action_type") == MESSAGING_WELCOME_ACTION:
            messaging = to_int(action.get("value"))
            break

    return {
        "business_id": business_id,
        "date": row_day,
        "hour": hour,
        "spend": to_float(record.get("spend")),
        "impressions": to_int(record.get("impressions")),
        "clicks": to_int(record.get("clicks")),
        "messaging_conversations": messaging,
    }


def _status(entity: Dict[str, Any]) -> Optional[str]:
    return entity.get("effective_status") or entity.get("status")


def _chunks(items: Sequence[Any], size: int) -> Iterable[Sequence[Any]]:
    for i in range(0, len(items), size):
        yield items[i:i + size]


# ========================================
# Orchestrator
# ========================================

class DataSyncService:
    """
    Sync orchestrator.

    Opens its own short-lived sessions from session_factory; the identity
    upserts of one chunk run concurrently, each in its own session.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        api_factory: Callable[[str], Any] = MetaAPI,
        chunk_size: Optional[int] = None,
    ):
        self.session_factory = session_factory
        self.api_factory = api_factory
        self.chunk_size = chunk_size or settings.ENTITY_UPSERT_CHUNK_SIZE

        self._handlers = {
            SyncPhase.ACCOUNT: self._sync_account,
            SyncPhase.CAMPAIGN: self._sync_campaigns,
            SyncPhase.ADSET: self._sync_adsets,
            SyncPhase.AD: self._sync_ads,
            SyncPhase.HOURLY: self._sync_hourly,
        }

    async def sync_business(
        self,
        business: Business,
        day: date,
        phases: Sequence[SyncPhase] = FULL_PIPELINE,
    ) -> BusinessSyncResult:
        """
        Run the given phases for one business and date.

        Never raises for a phase failure; see result.phases_failed.
        """
        result = BusinessSyncResult(business_id=business.id, business_name=business.name, day=day)

        if not business.access_token:
            logger.warning(f"Skipping {business.name}: no access token")
            result.skipped = True
            return result

        logger.info(f"Syncing {business.name} ({business.ad_account_id}) for {day}")

        api = self.api_factory(business.access_token)
        ctx = _PhaseContext(
            business_id=business.id,
            ad_account_id=business.ad_account_id,
            day=day,
            api=api,
            result=result,
        )

        try:
            for phase in phases:
                try:
                    await self._handlers[phase](ctx)
                    result.phases_completed.append(phase)
                except Exception as e:
                    message = str(e) or e.__class__.__name__
                    if isinstance(e, MetaRateLimitError) or is_rate_limit_message(message):
                        result.rate_limited = True
                    result.phases_failed[phase.value] = message
                    logger.error(f"{business.name} {day} phase {phase.value} failed: {message}")
        finally:
            await api.close()

        if result.success:
            logger.info(f"Synced {business.name} for {day}: {result.counts}")
        return result

    # ========================================
    # Stage helpers
    # ========================================

    async def _upsert_entity(self, repo_cls: Type[BaseRepository], data: Dict[str, Any]) -> str:
        async with self.session_factory() as session:
            await repo_cls(session).upsert(data)
            await session.commit()
        return data["id"]

    async def _reconcile(
        self,
        ctx: _PhaseContext,
        repo_cls: Type[BaseRepository],
        rows: List[Dict[str, Any]],
        label: str,
    ) -> None:
        """
        Upsert entity identities in chunks; the chunk's upserts run concurrently.

        Every chunk is awaited before this returns, so insights persisted
        afterwards see all identities. Per-item failures are logged and counted.
        """
        written = 0

        for chunk in _chunks(rows, self.chunk_size):
            outcomes = await asyncio.gather(
                *(self._upsert_entity(repo_cls, row) for row in chunk),
                return_exceptions=True,
            )
            for row, outcome in zip(chunk, outcomes):
                if isinstance(outcome, BaseException):
                    logger.error(f"Failed to upsert {label} {row.get('id')}: {outcome}")
                    ctx.result.add(f"{label}_failed")
                else:
                    written += 1

        ctx.result.add(label, written)

    async def _persist_insights(
        self,
        ctx: _PhaseContext,
        level: InsightLevel,
        repo_cls: Type[BaseRepository],
        write: Callable[[AnalyticsRepository, str, Dict[str, Any]], Any],
        label: str,
    ) -> None:
        """Fetch insights + destination breakdown, write rows for known ids"""
        insights = await ctx.api.fetch_insights(ctx.ad_account_id, ctx.date_str, level)
        destinations = await ctx.api.fetch_destination_insights(ctx.ad_account_id, ctx.date_str, level)
        breakdowns = compute_lead_breakdowns(destinations, level)

        id_field = LEVEL_ID_FIELDS[level]
        ids = [i.get(id_field) for i in insights if i.get(id_field)]

        written = 0
        async with self.session_factory() as session:
            known = await repo_cls(session).find_existing_ids(ids)
            analytics = AnalyticsRepository(session)

            for insight in insights:
                entity_id = insight.get(id_field)
                if not entity_id or entity_id not in known:
                    ctx.result.skipped_rows += 1
                    continue
                await write(analytics, entity_id, insight_row(insight, breakdowns.get(entity_id)))
                written += 1

            await session.commit()

        ctx.result.add(label, written)
        logger.info(f"   {label}: {written} written of {len(insights)} fetched")

    async def _known_parents(self, repo_cls: Type[BaseRepository], parent_ids: Iterable[str]) -> Set[str]:
        async with self.session_factory() as session:
            return await repo_cls(session).find_existing_ids(parent_ids)

    # ========================================
    # Phases
    # ========================================

    async def _sync_account(self, ctx: _PhaseContext) -> None:
        insight = await ctx.api.fetch_account_insight(ctx.ad_account_id, ctx.date_str)
        destinations = await ctx.api.fetch_destination_insights(
            ctx.ad_account_id, ctx.date_str, InsightLevel.ACCOUNT
        )
        if not insight:
            logger.info(f"   No account insight for {ctx.date_str}")
            return

        breakdown = compute_lead_breakdowns(destinations, InsightLevel.ACCOUNT).get(ACCOUNT_KEY)

        async with self.session_factory() as session:
            await AnalyticsRepository(session).upsert_daily_insight(
                ctx.business_id, ctx.day, account_row(insight, breakdown)
            )
            await session.commit()

        ctx.result.add("account_insights")

    async def _sync_campaigns(self, ctx: _PhaseContext) -> None:
        campaigns = await ctx.api.fetch_campaigns(ctx.ad_account_id)
        logger.info(f"   Fetched {len(campaigns)} campaigns")

        rows = [
            {
                "id": c["id"],
                "business_id": ctx.business_id,
                "name": c.get("name"),
                "objective": c.get("objective"),
                "status": _status(c),
            }
            for c in campaigns
            if c.get("id")
        ]
        await self._reconcile(ctx, CampaignRepository, rows, "campaigns")

        await self._persist_insights(
            ctx,
            InsightLevel.CAMPAIGN,
            CampaignRepository,
            lambda repo, entity_id, row: repo.upsert_campaign_insight(entity_id, ctx.day, row),
            "campaign_insights",
        )

    async def _sync_adsets(self, ctx: _PhaseContext) -> None:
        adsets = [a for a in await ctx.api.fetch_adsets(ctx.ad_account_id) if a.get("id")]
        logger.info(f"   Fetched {len(adsets)} ad sets")

        known_campaigns = await self._known_parents(
            CampaignRepository, (a.get("campaign_id") for a in adsets)
        )

        rows = []
        for adset in adsets:
            if adset.get("campaign_id") not in known_campaigns:
                ctx.result.skipped_rows += 1
                continue
            rows.append({
                "id": adset["id"],
                "campaign_id": adset["campaign_id"],
                "name": adset.get("name"),
                "status": _status(adset),
            })
        await self._reconcile(ctx, AdSetRepository, rows, "adsets")

        await self._persist_insights(
            ctx,
            InsightLevel.ADSET,
            AdSetRepository,
            lambda repo, entity_id, row: repo.upsert_adset_insight(entity_id, ctx.day, row),
            "adset_insights",
        )

    async def _sync_ads(self, ctx: _PhaseContext) -> None:
        ads = [a for a in await ctx.api.fetch_ads(ctx.ad_account_id) if a.get("id")]
        logger.info(f"   Fetched {len(ads)} ads")

        known_adsets = await self._known_parents(AdSetRepository, (a.get("adset_id") for a in ads))

        rows = []
        for ad in ads:
            if ad.get("adset_id") not in known_adsets:
                ctx.result.skipped_rows += 1
                continue
            creative = resolve_creative(ad.get("creative"))
            rows.append({
                "id": ad["id"],
                "ad_set_id": ad["adset_id"],
                "name": ad.get("name"),
                "status": _status(ad),
                "creative_url": creative.creative_url,
                "thumbnail_url": creative.thumbnail_url,
                "creative_type": creative.creative_type,
                "creative_body": creative.body,
                "creative_title": creative.title,
                "creative_dynamic_data": creative.dynamic_data,
            })
        await self._reconcile(ctx, AdRepository, rows, "ads")

        await self._persist_insights(
            ctx,
            InsightLevel.AD,
            AdRepository,
            lambda repo, entity_id, row: repo.upsert_ad_insight(entity_id, ctx.day, row),
            "ad_insights",
        )

    async def _sync_hourly(self, ctx: _PhaseContext) -> None:
        records = await ctx.api.fetch_hourly_insights(ctx.ad_account_id, ctx.date_str)

        rows = []
        for record in records:
            row = hourly_row(ctx.business_id, ctx.day, record)
            if row is None:
                ctx.result.skipped_rows += 1
                continue
            rows.append(row)

        if not rows:
            logger.info(f"   No hourly records for {ctx.date_str}")
            return

        # One transaction for the whole day
        async with self.session_factory() as session:
            await AnalyticsRepository(session).upsert_hourly_stats(rows)
            await session.commit()

        ctx.result.add("hourly_stats", len(rows))


# ========================================
# Entry point
# ========================================

async def sync_daily_insights(
    session_factory: async_sessionmaker,
    target_date: Optional[date] = None,
    service: Optional[DataSyncService] = None,
    phases: Sequence[SyncPhase] = FULL_PIPELINE,
) -> SyncRunSummary:
    """
    Sync every active business for one date (default: today).

    A business counts as failed when any phase failed or an unexpected
    exception escaped; it never stops the remaining businesses.
    """
    day = target_date or date.today()
    service = service or DataSyncService(session_factory)

    async with session_factory() as session:
        businesses = await BusinessRepository(session).list_active()

    summary = SyncRunSummary(day=day)
    if not businesses:
        logger.info("No active businesses found")
        return summary

    logger.info(f"Starting daily sync for {day} ({len(businesses)} businesses)")

    for business in businesses:
        try:
            result = await service.sync_business(business, day, phases)
        except Exception as e:
            logger.error(f"Failed to sync business {business.name}: {e}")
            result = BusinessSyncResult(
                business_id=business.id,
                business_name=business.name,
                day=day,
                rate_limited=is_rate_limit_message(str(e)),
                phases_failed={"unexpected": str(e) or e.__class__.__name__},
            )

        summary.results.append(result)
        if result.skipped:
            summary.skipped += 1
        elif result.success:
            summary.synced += 1
        else:
            summary.failed += 1

    logger.info(
        f"Daily sync for {day} complete: synced={summary.synced} "
        f"failed={summary.failed} skipped={summary.skipped}"
    )
    return summary
