# Conversion-funnel and engagement tracking for a single visitor session.

from .event_buffer import EventBuffer
from .models import (
    ABTestEvent,
    ConversionEvent,
    EngagementEvent,
    FunnelReport,
    FunnelSession,
    FunnelStageEvent,
)
from .tracker import ConversionTracker, extract_utm_params

__all__ = [
    "EventBuffer",
    "ABTestEvent",
    "ConversionEvent",
    "EngagementEvent",
    "FunnelReport",
    "FunnelSession",
    "FunnelStageEvent",
    "ConversionTracker",
    "extract_utm_params",
]
