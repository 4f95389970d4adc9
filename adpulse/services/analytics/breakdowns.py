"""
Lead destination breakdowns.

Insights requested with action_breakdowns=action_destination carry an
`action_destination` on each action; lead-type actions are bucketed into
WhatsApp / Instagram / Messenger counters per entity.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from adpulse.models.enums import InsightLevel
from adpulse.services.analytics.metric_calculator import LEAD_ACTION_TYPES, to_int

BREAKDOWN_LEAD_ACTION_TYPES = LEAD_ACTION_TYPES + (
    "onsite_conversion.total_messaging_connection",
)

ACCOUNT_KEY = "account"

# Insight field carrying the entity id at each level
LEVEL_ID_FIELDS = {
    InsightLevel.CAMPAIGN: "campaign_id",
    InsightLevel.ADSET: "adset_id",
    InsightLevel.AD: "ad_id",
}


class LeadBreakdown(BaseModel):
    whatsapp: int = 0
    instagram: int = 0
    messenger: int = 0


def classify_destination(destination: Optional[str], campaign_id: Optional[str] = None) -> Optional[str]:
    """
    Map an action_destination to a messaging channel.

    Heuristic: anything that is not WhatsApp/Instagram, is longer than 5
    chars and does not mention "other" is assumed to be a Messenger page.
    """
    dest = (destination or "").lower()
    if "whatsapp" in dest:
        return "whatsapp"
    if "instagram" in dest:
        return "instagram"
    if "messenger" in dest:
        return "messenger"
    if campaign_id and campaign_id.lower() in dest:
        return "messenger"
    if len(dest) > 5 and "other" not in dest:
        return "messenger"
    return None


def entity_key(insight: Dict[str, Any], level: InsightLevel) -> Optional[str]:
    """Grouping key for an insight row at the given level"""
    if level == InsightLevel.ACCOUNT:
        return ACCOUNT_KEY
    return insight.get(LEVEL_ID_FIELDS[level])


def compute_lead_breakdowns(
    insights: List[Dict[str, Any]],
    level: InsightLevel,
) -> Dict[str, LeadBreakdown]:
    """
    Group destination-broken-down insights by entity and bucket lead actions.

    Returns:
        Mapping entity id (or "account") -> LeadBreakdown
    """
    stats: Dict[str, LeadBreakdown] = {}

    for item in insights:
        key = entity_key(item, level)
        if not key:
            continue

        bucket = stats.setdefault(key, LeadBreakdown())

        for action in item.get("actions") or []:
            if action.get("action_type") not in BREAKDOWN_LEAD_ACTION_TYPES:
                continue
            channel = classify_destination(action.get("action_destination"), item.get("campaign_id"))
            if channel:
                setattr(bucket, channel, getattr(bucket, channel) + to_int(action.get("value")))

    return stats
