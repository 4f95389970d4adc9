"""
Lead Sync Service
Pulls lead-form submissions for every ad of active businesses.
"""
import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import async_sessionmaker

from adpulse.core.config import settings
from adpulse.models.business import Business
from adpulse.repositories.business_repo import BusinessRepository
from adpulse.repositories.lead_repo import LeadRepository
from adpulse.services.meta.lead_fields import extract_contact_fields
from adpulse.services.meta.meta_api import MetaAPI, MetaAPIError

logger = logging.getLogger(__name__)


class BusinessLeadResult(BaseModel):
    business_id: str
    business_name: str
    leads: int = 0
    ads_failed: int = 0
    error: Optional[str] = None


class LeadSyncSummary(BaseModel):
    total_leads: int = 0
    results: List[BusinessLeadResult] = []


def parse_created_time(value: Optional[str]) -> Optional[datetime]:
    """Graph API timestamps look like 2024-01-15T10:00:00+0000"""
    if not value:
        return None
    for fmt in ("%Y-%m-%dT%H:%M:%S%z", "%Y-%m-%dT%H:%M:%S.%f%z"):
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def lead_row(business_id: str, lead: Dict[str, Any]) -> Dict[str, Any]:
    field_data = lead.get("field_data") or []
    row = {
        "id": lead["id"],
        "business_id": business_id,
        "created_time": parse_created_time(lead.get("created_time")),
        "ad_id": lead.get("ad_id"),
        "ad_name": lead.get("ad_name"),
        "raw_field_data": field_data,
    }
    row.update(extract_contact_fields(field_data))
    return row


class LeadSyncService:
    def __init__(
        self,
        session_factory: async_sessionmaker,
        api_factory: Callable[[str], Any] = MetaAPI,
        chunk_size: Optional[int] = None,
    ):
        self.session_factory = session_factory
        self.api_factory = api_factory
        self.chunk_size = chunk_size or settings.LEAD_SYNC_CHUNK_SIZE

    async def _sync_ad(self, api: Any, business: Business, ad_id: str) -> int:
        """Fetch and store one ad's leads in a single transaction"""
        leads = await api.fetch_leads(ad_id)
        rows = [lead_row(business.id, lead) for lead in leads if lead.get("id")]
        if not rows:
            return 0

        async with self.session_factory() as session:
            await LeadRepository(session).upsert_many(rows)
            await session.commit()
        return len(rows)

    async def sync_business(self, business: Business) -> BusinessLeadResult:
        result = BusinessLeadResult(business_id=business.id, business_name=business.name)
        api = self.api_factory(business.access_token)

        try:
            ads = await api.fetch_ads(business.ad_account_id)
            ad_ids = [ad["id"] for ad in ads if ad.get("id")]

            for i in range(0, len(ad_ids), self.chunk_size):
                chunk = ad_ids[i:i + self.chunk_size]
                outcomes = await asyncio.gather(
                    *(self._sync_ad(api, business, ad_id) for ad_id in chunk),
                    return_exceptions=True,
                )
                for ad_id, outcome in zip(chunk, outcomes):
                    if isinstance(outcome, BaseException):
                        # Typically a permission error on a single ad
                        logger.error(f"Failed to sync leads for ad {ad_id}: {outcome}")
                        result.ads_failed += 1
                    else:
                        result.leads += outcome
        except MetaAPIError as e:
            logger.error(f"Failed to sync leads for business {business.name}: {e}")
            result.error = str(e)
        finally:
            await api.close()

        logger.info(f"Synced {result.leads} leads for {business.name}")
        return result

    async def sync(self, business_id: Optional[str] = None) -> LeadSyncSummary:
        async with self.session_factory() as session:
            businesses = await BusinessRepository(session).list_active()

        targets = [
            b for b in businesses
            if b.access_token and (business_id is None or b.id == business_id)
        ]

        summary = LeadSyncSummary()
        if not targets:
            logger.info("No active businesses with tokens found")
            return summary

        for business in targets:
            result = await self.sync_business(business)
            summary.results.append(result)
            summary.total_leads += result.leads

        return summary


async def sync_leads(
    session_factory: async_sessionmaker,
    business_id: Optional[str] = None,
    chunk_size: Optional[int] = None,
    api_factory: Callable[[str], Any] = MetaAPI,
) -> LeadSyncSummary:
    """Sync leads for all active businesses with a token, or only `business_id`"""
    service = LeadSyncService(session_factory, api_factory=api_factory, chunk_size=chunk_size)
    return await service.sync(business_id)
