"""
Enums for database models
"""
import enum


class LeadStatus(str, enum.Enum):
    """Operator-maintained lead workflow status"""
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    CONVERTED = "converted"
    JUNK = "junk"


class InsightLevel(str, enum.Enum):
    """Graph API insight levels"""
    ACCOUNT = "account"
    CAMPAIGN = "campaign"
    ADSET = "adset"
    AD = "ad"


class SyncState(str, enum.Enum):
    """Process-wide sync status shown by the UI"""
    IDLE = "idle"
    SYNCING = "syncing"
    SUCCESS = "success"
    FAILED = "failed"
