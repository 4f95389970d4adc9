"""
System-level models (global settings, sync status, etc.)
"""
from sqlalchemy import Column, Integer, String, Boolean, Text

from adpulse.models.base import BaseModel


# Keys stored in system_settings
SYNC_STATUS_KEY = "sync_status"
SYNC_STATUS_UPDATED_AT_KEY = "sync_status_updated_at"
LAST_SYNC_AT_KEY = "last_sync_at"
AUTO_SYNC_ENABLED_KEY = "auto_sync_enabled"


class SystemSetting(BaseModel):
    """
    Key-value settings stored in the database.

    Holds process-wide state such as the sync status shown by the UI and
    the auto-sync switch read by the scheduler.
    """

    __tablename__ = "system_settings"

    id = Column(Integer, primary_key=True, index=True)

    key = Column(String(100), unique=True, index=True, nullable=False)

    # Stored as text (may be a secret)
    value = Column(Text, nullable=True)

    # e.g. "sync"
    category = Column(String(50), nullable=True)

    # true = mask when displayed
    is_secret = Column(Boolean, default=False)

    description = Column(String(255), nullable=True)
