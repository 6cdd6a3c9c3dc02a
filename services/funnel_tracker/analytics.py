import logging
from typing import Any, Dict, Optional, Protocol

from .models import FunnelEventBase

logger = logging.getLogger(__name__)


class AnalyticsSink(Protocol):
    """
    Shape of an analytics backend. Every method is optional: the tracker only
    calls what the sink actually provides.
    """
    def track_custom_event(self, name: str, payload: Dict[str, Any]) -> None: ...

    def track_event(self, name: str, payload: Dict[str, Any]) -> None: ...

    def track_timing(self, category: str, label: str, ms: int) -> None: ...


def send_to_sink(sink: Optional[Any], event: FunnelEventBase) -> bool:
    """Forwards one event; prefers `track_custom_event`, falls back to `track_event`."""
    if sink is None:
        return False
    handler = getattr(sink, "track_custom_event", None) or getattr(sink, "track_event", None)
    if handler is None:
        logger.debug(f"Analytics sink {type(sink).__name__} accepts no events")
        return False
    try:
        handler(event.event_name, event.to_payload())
        return True
    except Exception as e:
        logger.warning(f"Analytics sink rejected event '{event.event_name}': {e}")
        return False


def send_timing(sink: Optional[Any], category: str, label: str, ms: int) -> bool:
    handler = getattr(sink, "track_timing", None) if sink is not None else None
    if handler is None:
        return False
    try:
        handler(category, label, ms)
        return True
    except Exception as e:
        logger.warning(f"Analytics sink rejected timing {category}/{label}: {e}")
        return False


def flush_sink(sink: Optional[Any]) -> None:
    handler = getattr(sink, "flush", None) if sink is not None else None
    if handler is None:
        return
    try:
        handler()
    except Exception as e:
        logger.warning(f"Flushing analytics sink failed: {e}")
