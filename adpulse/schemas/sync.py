"""
Sync API schemas
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from adpulse.models.enums import SyncState


class SyncStatusResponse(BaseModel):
    status: SyncState = SyncState.IDLE
    last_sync_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LeadSyncRequest(BaseModel):
    business_id: Optional[str] = None
