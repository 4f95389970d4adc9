# Meta Services Module

from adpulse.services.meta.meta_api import (
    MetaAPI,
    MetaAPIError,
    MetaAuthError,
    MetaPermissionError,
    MetaRateLimitError,
)
from adpulse.services.meta.creative import ResolvedCreative, resolve_creative
from adpulse.services.meta.lead_fields import extract_contact_fields

__all__ = [
    "MetaAPI",
    "MetaAPIError",
    "MetaAuthError",
    "MetaPermissionError",
    "MetaRateLimitError",
    "ResolvedCreative",
    "resolve_creative",
    "extract_contact_fields",
]
