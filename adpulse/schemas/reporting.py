"""
Reporting schemas (entity listings with aggregated insights, hour histograms)
"""
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel

from adpulse.services.analytics.metric_calculator import safe_divide


class MetricTotals(BaseModel):
    """Summed insights over the requested range plus rates derived from the sums"""
    spend: float = 0
    impressions: int = 0
    clicks: int = 0
    leads: int = 0
    conversions: int = 0
    revenue: float = 0
    ctr: float = 0
    cpc: float = 0
    cpl: float = 0
    roas: float = 0

    @classmethod
    def from_sums(cls, sums: Dict[str, float]) -> "MetricTotals":
        spend = float(sums.get("spend") or 0)
        impressions = int(sums.get("impressions") or 0)
        clicks = int(sums.get("clicks") or 0)
        leads = int(sums.get("leads") or 0)
        revenue = float(sums.get("revenue") or 0)
        return cls(
            spend=spend,
            impressions=impressions,
            clicks=clicks,
            leads=leads,
            conversions=int(sums.get("conversions") or 0),
            revenue=revenue,
            ctr=safe_divide(clicks, impressions, 100),
            cpc=safe_divide(spend, clicks),
            cpl=safe_divide(spend, leads),
            roas=safe_divide(revenue, spend),
        )


class CampaignReport(BaseModel):
    id: str
    business_id: str
    business_name: str
    business_color: Optional[str] = None
    name: str
    objective: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    aggregate: MetricTotals


class AdSetReport(BaseModel):
    id: str
    campaign_id: str
    campaign_name: str
    business_id: str
    business_name: str
    business_color: Optional[str] = None
    name: str
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    aggregate: MetricTotals


class AdReport(BaseModel):
    id: str
    ad_set_id: str
    ad_set_name: str
    campaign_id: str
    campaign_name: str
    business_id: str
    name: str
    status: Optional[str] = None
    creative_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    creative_type: Optional[str] = None
    creative_body: Optional[str] = None
    creative_title: Optional[str] = None
    created_at: Optional[datetime] = None
    aggregate: MetricTotals


class HourBucket(BaseModel):
    """One hour of a 24-bucket histogram, labelled "HH:00" """
    hour: int
    count: int = 0
    label: str

    @classmethod
    def empty_day(cls):
        return [cls(hour=h, count=0, label=f"{h:02d}:00") for h in range(24)]
