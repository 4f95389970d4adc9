# Analytics Services Module

from adpulse.services.analytics.metric_calculator import (
    CalculatedMetrics,
    VideoMetrics,
    parse_metrics,
    parse_video_metrics,
)
from adpulse.services.analytics.breakdowns import (
    LeadBreakdown,
    compute_lead_breakdowns,
)

__all__ = [
    "CalculatedMetrics",
    "VideoMetrics",
    "parse_metrics",
    "parse_video_metrics",
    "LeadBreakdown",
    "compute_lead_breakdowns",
]
