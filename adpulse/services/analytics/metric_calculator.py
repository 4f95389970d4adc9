"""
Metric Calculator
Derives KPI sets from raw Meta insight records.

Pure functions: no I/O, and malformed numeric strings count as 0
instead of raising.
"""
import math
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel

# Actions Meta reports for lead-form and messaging leads
LEAD_ACTION_TYPES = (
    "lead",
    "onsite_conversion.lead_grouped",
    "onsite_conversion.messaging_conversation_started_7d",
    "messaging_conversations",
)

PURCHASE_ACTION_TYPES = (
    "purchase",
    "onsite_conversion.purchase",
    "offsite_conversion.fb_pixel_purchase",
    "omni_purchase",
)

VIDEO_VIEW_ACTION = "video_view"
VIDEO_THRUPLAY_ACTION = "video_thruplay"


class CalculatedMetrics(BaseModel):
    """KPI set shared by every insight grain"""

    spend: float = 0.0
    impressions: int = 0
    clicks: int = 0
    leads: int = 0
    conversions: int = 0
    revenue: float = 0.0
    ctr: float = 0.0
    cpm: float = 0.0
    cpc: float = 0.0
    cpl: float = 0.0
    cvr: float = 0.0
    roas: float = 0.0


class VideoMetrics(BaseModel):
    """Video engagement rates (account level only)"""

    hook_rate: float = 0.0
    hold_rate: float = 0.0


# ========================================
# Parsing helpers
# ========================================

def to_float(value: Any) -> float:
    """Parse a Graph API numeric field, 0 when missing or malformed"""
    if value is None or value == "":
        return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(result) or math.isinf(result):
        return 0.0
    return result


def to_int(value: Any) -> int:
    """Parse a Graph API count field, truncating decimals"""
    return int(to_float(value))


def safe_divide(numerator: float, denominator: float, scale: float = 1.0) -> float:
    """numerator / denominator * scale, or 0 when the denominator is 0"""
    if not denominator:
        return 0.0
    return numerator / denominator * scale


def _sum_actions(actions: Optional[Iterable[Dict[str, Any]]], action_types: Iterable[str], parse=to_int):
    wanted = set(action_types)
    total = 0
    for action in actions or []:
        if not isinstance(action, dict):
            continue
        if action.get("action_type") in wanted:
            total += parse(action.get("value"))
    return total


def _first_action_value(actions: Optional[List[Dict[str, Any]]], action_type: str) -> int:
    for action in actions or []:
        if isinstance(action, dict) and action.get("action_type") == action_type:
            return to_int(action.get("value"))
    return 0


# ========================================
# Public API
# ========================================

def parse_leads(actions: Optional[List[Dict[str, Any]]]) -> int:
    return _sum_actions(actions, LEAD_ACTION_TYPES)


def parse_conversions(actions: Optional[List[Dict[str, Any]]]) -> int:
    return _sum_actions(actions, PURCHASE_ACTION_TYPES)


def parse_revenue(action_values: Optional[List[Dict[str, Any]]]) -> float:
    return float(_sum_actions(action_values, PURCHASE_ACTION_TYPES, parse=to_float))


def parse_metrics(insight: Dict[str, Any]) -> CalculatedMetrics:
    """
    Compute the KPI set for one insight record.

    Args:
        insight: Raw Graph API insight row (string-typed numbers,
            `actions` / `action_values` lists)

    Returns:
        CalculatedMetrics with every rate zero-guarded
    """
    spend = to_float(insight.get("spend"))
    impressions = to_int(insight.get("impressions"))
    clicks = to_int(insight.get("clicks"))
    leads = parse_leads(insight.get("actions"))
    conversions = parse_conversions(insight.get("actions"))
    revenue = parse_revenue(insight.get("action_values"))

    return CalculatedMetrics(
        spend=spend,
        impressions=impressions,
        clicks=clicks,
        leads=leads,
        conversions=conversions,
        revenue=revenue,
        ctr=safe_divide(clicks, impressions, 100),
        cpm=safe_divide(spend, impressions, 1000),
        cpc=safe_divide(spend, clicks),
        cpl=safe_divide(spend, leads),
        cvr=safe_divide(conversions, clicks, 100),
        roas=safe_divide(revenue, spend),
    )


def parse_video_metrics(insight: Dict[str, Any], impressions: int) -> VideoMetrics:
    """Hook rate (3s views) and hold rate (thru-plays) per impression"""
    actions = insight.get("actions")
    video_views = _first_action_value(actions, VIDEO_VIEW_ACTION)
    thru_plays = _first_action_value(actions, VIDEO_THRUPLAY_ACTION)

    return VideoMetrics(
        hook_rate=safe_divide(video_views, impressions, 100),
        hold_rate=safe_divide(thru_plays, impressions, 100),
    )
