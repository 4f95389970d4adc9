# Sync Services Module

from adpulse.services.sync.data_sync import (
    ACCOUNT_ONLY,
    FULL_PIPELINE,
    BusinessSyncResult,
    DataSyncService,
    SyncPhase,
    SyncRunSummary,
    sync_daily_insights,
)
from adpulse.services.sync.backfill import (
    BackfillResult,
    BusinessNotFoundError,
    SmartSyncResult,
    backfill_business,
    past_days,
    smart_sync,
)
from adpulse.services.sync.lead_sync import LeadSyncSummary, sync_leads
from adpulse.services.sync.status import (
    SyncStatusRegister,
    SyncStatusSnapshot,
    next_state,
    tracked_sync,
)

__all__ = [
    "ACCOUNT_ONLY",
    "FULL_PIPELINE",
    "BusinessSyncResult",
    "DataSyncService",
    "SyncPhase",
    "SyncRunSummary",
    "sync_daily_insights",
    "BackfillResult",
    "BusinessNotFoundError",
    "SmartSyncResult",
    "backfill_business",
    "past_days",
    "smart_sync",
    "LeadSyncSummary",
    "sync_leads",
    "SyncStatusRegister",
    "SyncStatusSnapshot",
    "next_state",
    "tracked_sync",
]
