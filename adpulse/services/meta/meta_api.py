"""
Meta Graph API Client
Fetches insights, entity lists and leads for an ad account.
"""
import json
import logging
from typing import Optional, Dict, List, Any

import httpx

from adpulse.core.config import settings
from adpulse.models.enums import InsightLevel

logger = logging.getLogger(__name__)

INSIGHT_FIELDS = [
    "spend",
    "impressions",
    "clicks",
    "reach",
    "frequency",
    "actions",
    "action_values",
    "cpc",
    "cpm",
    "cpp",
    "ctr",
    "campaign_id",
    "adset_id",
    "ad_id",
]

HOURLY_BREAKDOWN = "hourly_stats_aggregated_by_advertiser_time_zone"
DESTINATION_BREAKDOWN = "action_destination"

# Only entities that can still deliver
ENTITY_STATUS_FILTER = json.dumps(["ACTIVE", "PAUSED"])

AD_CREATIVE_FIELDS = (
    "creative{id,thumbnail_url,image_url,video_id,object_type,body,title,"
    "object_story_spec,asset_feed_spec}"
)

INSIGHTS_PAGE_LIMIT = 50
ENTITY_PAGE_LIMIT = 100

RATE_LIMIT_CODES = {4, 17, 32, 613}
PERMISSION_CODES = {10}


# ========================================
# Errors
# ========================================

class MetaAPIError(Exception):
    """Graph API call failed; carries the platform's error message"""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        subcode: Optional[int] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.subcode = subcode
        self.status_code = status_code


class MetaAuthError(MetaAPIError):
    """Invalid or expired access token"""


class MetaPermissionError(MetaAPIError):
    """Token lacks permission for the requested resource"""


class MetaRateLimitError(MetaAPIError):
    """Application or ad-account request limit reached"""


def is_rate_limit_message(message: Optional[str]) -> bool:
    text = (message or "").lower()
    return "request limit" in text or "rate limit" in text or "too many calls" in text


def build_error(payload: Any, status_code: Optional[int] = None) -> MetaAPIError:
    """Turn a Graph API error body into the matching typed error"""
    error = payload.get("error") if isinstance(payload, dict) else None
    if not isinstance(error, dict):
        error = {}

    message = error.get("message") or f"Meta API request failed (HTTP {status_code})"
    code = error.get("code")
    subcode = error.get("error_subcode")
    kwargs = {"code": code, "subcode": subcode, "status_code": status_code}

    if code in RATE_LIMIT_CODES or (isinstance(code, int) and 80000 <= code <= 80014) \
            or is_rate_limit_message(message):
        return MetaRateLimitError(message, **kwargs)
    if code == 190 or status_code == 401:
        return MetaAuthError(message, **kwargs)
    if code in PERMISSION_CODES or (isinstance(code, int) and 200 <= code <= 299) or status_code == 403:
        return MetaPermissionError(message, **kwargs)
    return MetaAPIError(message, **kwargs)


# ========================================
# Client
# ========================================

class MetaAPI:
    """
    Meta Graph API client for one access token.

    Every list call follows `paging.next` until the platform reports no
    further page. Errors are raised, never retried here; callers decide.
    """

    def __init__(
        self,
        access_token: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.access_token = access_token
        self.base_url = (base_url or settings.meta_graph_api_url).rstrip("/")
        self.timeout = timeout or settings.META_REQUEST_TIMEOUT_SECONDS
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self):
        """Close the HTTP client"""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "MetaAPI":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    @staticmethod
    def normalize_account_id(ad_account_id: str) -> str:
        """Ensure act_ prefix"""
        if not ad_account_id.startswith("act_"):
            return f"act_{ad_account_id}"
        return ad_account_id

    # ========================================
    # Transport
    # ========================================

    async def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            response = await self.client.get(url, params=params)
        except httpx.HTTPError as e:
            raise MetaAPIError(f"HTTP error calling Meta API: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.status_code >= 400 or (isinstance(data, dict) and "error" in data):
            error = build_error(data, response.status_code)
            logger.error(f"Meta API Error ({response.status_code}): {error.message}")
            raise error

        if not isinstance(data, dict):
            raise MetaAPIError("Unexpected non-JSON response from Meta API", status_code=response.status_code)

        return data

    async def _fetch_list(self, path: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        """GET a list endpoint and follow pagination cursors"""
        url: Optional[str] = f"{self.base_url}/{path}"
        query: Optional[Dict[str, Any]] = {**params, "access_token": self.access_token}
        results: List[Dict[str, Any]] = []

        while url:
            data = await self._get(url, query)
            results.extend(data.get("data", []))

            url = (data.get("paging") or {}).get("next")
            query = None  # Next URL contains all params

        return results

    # ========================================
    # Insights API
    # ========================================

    async def fetch_insights(
        self,
        ad_account_id: str,
        date: str,
        level: InsightLevel,
        breakdowns: Optional[str] = None,
        action_breakdowns: Optional[str] = None,
        fields: Optional[List[str]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Fetch all insight rows for one day at one level.

        Args:
            ad_account_id: Ad account id (act_ prefix optional)
            date: Day to fetch (YYYY-MM-DD)
            level: account, campaign, adset or ad
            breakdowns: Optional breakdown dimension
            action_breakdowns: Optional action breakdown dimension

        Returns:
            List of insight rows
        """
        params = {
            "time_range": json.dumps({"since": date, "until": date}),
            "fields": ",".join(fields or INSIGHT_FIELDS),
            "level": InsightLevel(level).value,
            "limit": INSIGHTS_PAGE_LIMIT,
        }
        if breakdowns:
            params["breakdowns"] = breakdowns
        if action_breakdowns:
            params["action_breakdowns"] = action_breakdowns

        account = self.normalize_account_id(ad_account_id)
        return await self._fetch_list(f"{account}/insights", params)

    async def fetch_account_insight(self, ad_account_id: str, date: str) -> Optional[Dict[str, Any]]:
        """Account level insight for one day, or None when there is no data"""
        rows = await self.fetch_insights(ad_account_id, date, InsightLevel.ACCOUNT)
        return rows[0] if rows else None

    async def fetch_destination_insights(
        self,
        ad_account_id: str,
        date: str,
        level: InsightLevel,
    ) -> List[Dict[str, Any]]:
        """Insights with actions broken down by destination"""
        return await self.fetch_insights(
            ad_account_id, date, level, action_breakdowns=DESTINATION_BREAKDOWN
        )

    async def fetch_hourly_insights(self, ad_account_id: str, date: str) -> List[Dict[str, Any]]:
        """Account level insights for one day, one row per hour"""
        return await self.fetch_insights(
            ad_account_id,
            date,
            InsightLevel.ACCOUNT,
            breakdowns=HOURLY_BREAKDOWN,
            fields=["spend", "impressions", "clicks", "actions"],
        )

    # ========================================
    # Entities API
    # ========================================

    async def fetch_campaigns(self, ad_account_id: str) -> List[Dict[str, Any]]:
        """Fetch active and paused campaigns for an ad account"""
        account = self.normalize_account_id(ad_account_id)
        return await self._fetch_list(f"{account}/campaigns", {
            "fields": "id,name,objective,status,effective_status",
            "effective_status": ENTITY_STATUS_FILTER,
            "limit": ENTITY_PAGE_LIMIT,
        })

    async def fetch_adsets(self, ad_account_id: str) -> List[Dict[str, Any]]:
        """Fetch active and paused ad sets for an ad account"""
        account = self.normalize_account_id(ad_account_id)
        return await self._fetch_list(f"{account}/adsets", {
            "fields": "id,name,campaign_id,status,effective_status",
            "effective_status": ENTITY_STATUS_FILTER,
            "limit": ENTITY_PAGE_LIMIT,
        })

    async def fetch_ads(self, ad_account_id: str) -> List[Dict[str, Any]]:
        """Fetch active and paused ads (with creative) for an ad account"""
        account = self.normalize_account_id(ad_account_id)
        return await self._fetch_list(f"{account}/ads", {
            "fields": f"id,name,adset_id,status,effective_status,{AD_CREATIVE_FIELDS}",
            "effective_status": ENTITY_STATUS_FILTER,
            "limit": ENTITY_PAGE_LIMIT,
        })

    # ========================================
    # Leads / Account API
    # ========================================

    async def fetch_leads(self, ad_id: str) -> List[Dict[str, Any]]:
        """Fetch lead form submissions for one ad"""
        return await self._fetch_list(f"{ad_id}/leads", {
            "fields": "id,created_time,ad_id,ad_name,field_data",
            "limit": ENTITY_PAGE_LIMIT,
        })

    async def fetch_account_info(self, ad_account_id: str) -> Dict[str, Any]:
        """Lightweight call used to validate an account id + token pair"""
        account = self.normalize_account_id(ad_account_id)
        return await self._get(f"{self.base_url}/{account}", {
            "fields": "name,currency,account_status",
            "access_token": self.access_token,
        })
