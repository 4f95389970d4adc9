"""
Database models for AdPulse
"""
from adpulse.models.base import Base, BaseModel, TimestampMixin
from adpulse.models.enums import LeadStatus, InsightLevel, SyncState

# Business
from adpulse.models.business import Business, mask_token

# Campaign/AdSet/Ad
from adpulse.models.campaign import Campaign, AdSet, Ad

# Insights
from adpulse.models.insight import (
    InsightMetricsMixin, DailyInsight, CampaignDailyInsight, AdSetDailyInsight,
    AdDailyInsight, HourlyStat,
)

# Leads
from adpulse.models.lead import Lead

# System models
from adpulse.models.system import SystemSetting


__all__ = [
    # Base
    "Base", "BaseModel", "TimestampMixin",

    # Enums
    "LeadStatus", "InsightLevel", "SyncState",

    # Business
    "Business", "mask_token",

    # Campaign/AdSet/Ad
    "Campaign", "AdSet", "Ad",

    # Insights
    "InsightMetricsMixin", "DailyInsight", "CampaignDailyInsight",
    "AdSetDailyInsight", "AdDailyInsight", "HourlyStat",

    # Leads
    "Lead",

    # System
    "SystemSetting",
]
