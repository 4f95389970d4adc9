# Repositories - persistence for the sync pipeline

from adpulse.repositories.base import BaseRepository, dialect_insert
from adpulse.repositories.campaign_repo import CampaignRepository
from adpulse.repositories.adset_repo import AdSetRepository
from adpulse.repositories.ad_repo import AdRepository
from adpulse.repositories.analytics_repo import AnalyticsRepository
from adpulse.repositories.lead_repo import LeadRepository
from adpulse.repositories.business_repo import BusinessRepository
from adpulse.repositories.settings_repo import SettingsRepository
from adpulse.repositories.reporting_repo import ReportingRepository

__all__ = [
    "BaseRepository",
    "dialect_insert",
    "CampaignRepository",
    "AdSetRepository",
    "AdRepository",
    "AnalyticsRepository",
    "LeadRepository",
    "BusinessRepository",
    "SettingsRepository",
    "ReportingRepository",
]
