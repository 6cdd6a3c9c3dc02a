import asyncio
import logging
import math
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Union
from urllib.parse import parse_qs

from services.maturity_engine.models import ScoringResult

from . import heuristics
from .analytics import flush_sink, send_timing, send_to_sink
from .definitions import (
    CONVERSION_EVENTS,
    CONVERSION_INTENT_EVENTS,
    EVENT_BUFFER_CAPACITY,
    EVENT_BUFFER_KEY,
    FUNNEL_STAGES,
    SCROLL_MILESTONES,
    SCROLL_THROTTLE_MS,
    TIME_MILESTONES,
    TIME_POLL_INTERVAL_SECONDS,
    UTM_PARAMS,
)
from .event_buffer import EventBuffer
from .models import (
    ABTestEvent,
    ConversionEvent,
    ConversionStats,
    EngagementEvent,
    FunnelReport,
    FunnelSession,
    FunnelStageEvent,
)

logger = logging.getLogger(__name__)

ResultOrLevel = Union[ScoringResult, str, None]


def generate_session_id(now_ms: int) -> str:
    return f"conv_{now_ms}_{uuid.uuid4().hex[:9]}"


def extract_utm_params(query_string: Optional[str]) -> Optional[Dict[str, str]]:
    """UTM parameters from a URL query string, or None when there are none."""
    if not query_string:
        return None
    parsed = parse_qs(query_string.lstrip("?"))
    utm_params = {name: parsed[name][0] for name in UTM_PARAMS if parsed.get(name) and parsed[name][0]}
    return utm_params or None


def _level_of(result: ResultOrLevel) -> Optional[str]:
    if isinstance(result, ScoringResult):
        return result.level
    return result or None


class ConversionTracker:
    """
    Funnel and engagement tracking for a single visitor session.

    One instance per page load. Every recorded event is appended to the
    in-memory session log and forwarded to the analytics sink; conversion
    events are also persisted to the capped local event buffer. Failures of
    the sink or of storage are logged and never propagate.
    """
    def __init__(
        self,
        sink: Optional[Any] = None,
        storage: Optional[Any] = None,
        *,
        session_id: Optional[str] = None,
        query_string: str = "",
        referrer: str = "",
        user_agent: str = "",
        clock: Callable[[], float] = time.time,
        conversion_events: Optional[Mapping[str, Mapping[str, Any]]] = None,
        buffer_key: str = EVENT_BUFFER_KEY,
        buffer_capacity: int = EVENT_BUFFER_CAPACITY,
        time_poll_interval: float = TIME_POLL_INTERVAL_SECONDS,
        scroll_throttle_ms: int = SCROLL_THROTTLE_MS,
    ):
        """
        Args:
            sink: Analytics backend exposing any of `track_custom_event`,
                `track_event`, `track_timing`, `flush`.
            storage: Key/value backend for the event buffer (in-memory if omitted).
            session_id: Explicit id; generated when omitted.
            query_string: Landing URL query string, used for UTM attribution.
            referrer: Referring URL.
            user_agent: Visitor user agent.
            clock: Returns the current time in seconds since the epoch.
            conversion_events: Override of the conversion event table.
            buffer_key: Storage key of the event buffer.
            buffer_capacity: Maximum number of buffered events.
            time_poll_interval: Seconds between time-milestone checks.
            scroll_throttle_ms: Minimum gap between handled scroll events.
        """
        self.sink = sink
        self._clock = clock
        self.conversion_events = dict(conversion_events or CONVERSION_EVENTS)
        self.buffer = EventBuffer(storage, key=buffer_key, capacity=buffer_capacity)
        self.time_poll_interval = time_poll_interval
        self.scroll_throttle_ms = scroll_throttle_ms

        now_ms = self._now_ms()
        self.session = FunnelSession(
            session_id=session_id or generate_session_id(now_ms),
            start_time=now_ms,
            utm_params=extract_utm_params(query_string),
            referrer=referrer,
            user_agent=user_agent,
        )

        self._exit_intent_triggered = False
        self._scroll_milestones_seen: Set[int] = set()
        self._time_milestones_seen: Set[int] = set()
        self._max_scroll = 0
        self._last_scroll_ms: Optional[int] = None
        self._poller_task: Optional[asyncio.Task] = None
        self._ended = False

    # --- Session state ---

    @property
    def session_id(self) -> str:
        return self.session.session_id

    @property
    def current_stage(self) -> int:
        return self.session.current_stage

    @property
    def events(self):
        return self.session.events

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def time_on_page_ms(self) -> int:
        return self._now_ms() - self.session.start_time

    def engagement_event_count(self) -> int:
        return sum(1 for e in self.session.events if isinstance(e, EngagementEvent))

    def _record(self, event) -> None:
        self.session.events.append(event)
        send_to_sink(self.sink, event)

    def start(self, page_data: Optional[Mapping[str, Any]] = None) -> str:
        """Records the initial page view and returns the session id."""
        data = {
            "referrer": self.session.referrer,
            "utm_params": self.session.utm_params,
            "user_agent": self.session.user_agent,
        }
        data.update(page_data or {})
        self.track_funnel_stage("page_view", data)
        logger.info(f"Funnel tracking started for session {self.session_id}")
        return self.session_id

    # --- Funnel ---

    def advance(
        self, stage_name: str, data: Optional[Mapping[str, Any]] = None
    ) -> Optional[FunnelStageEvent]:
        """
        Moves the session to `stage_name` and logs a stage event.

        `current_stage` only ever moves forward: re-entering an earlier stage
        leaves it unchanged but is still logged. Unknown stages are ignored.
        """
        stage = FUNNEL_STAGES.get(stage_name)
        if stage is None:
            logger.warning(f"Unknown funnel stage: {stage_name}")
            return None

        if stage["stage"] > self.session.current_stage:
            self.session.current_stage = stage["stage"]

        event = FunnelStageEvent(
            session_id=self.session_id,
            timestamp=self._now_ms(),
            stage=stage["stage"],
            stage_name=stage_name,
            stage_display_name=stage["name"],
            time_since_start=self.time_on_page_ms(),
            data=dict(data or {}),
        )
        self._record(event)
        return event

    def track_funnel_stage(
        self, stage_name: str, data: Optional[Mapping[str, Any]] = None
    ) -> Optional[FunnelStageEvent]:
        return self.advance(stage_name, data)

    def track_conversion(
        self, event_type: str, data: Optional[Mapping[str, Any]] = None
    ) -> Optional[ConversionEvent]:
        config = self.conversion_events.get(event_type)
        if config is None:
            logger.warning(f"Unknown conversion event: {event_type}")
            return None

        event = ConversionEvent(
            session_id=self.session_id,
            timestamp=self._now_ms(),
            event_type=event_type,
            category=config["category"],
            action=config["action"],
            value=config["value"],
            priority=config["priority"],
            data=dict(data or {}),
        )
        self._record(event)
        self.buffer.append(event.to_payload())

        if event_type in CONVERSION_INTENT_EVENTS:
            self.track_funnel_stage("conversion_intent", {"trigger_event": event_type})

        return event

    def track_engagement(
        self, engagement_type: str, data: Optional[Mapping[str, Any]] = None
    ) -> EngagementEvent:
        event = EngagementEvent(
            session_id=self.session_id,
            timestamp=self._now_ms(),
            engagement_type=engagement_type,
            time_since_start=self.time_on_page_ms(),
            data=dict(data or {}),
        )
        self._record(event)
        return event

    def track_ab_test(
        self, test_name: str, variant: str, data: Optional[Mapping[str, Any]] = None
    ) -> ABTestEvent:
        event = ABTestEvent(
            session_id=self.session_id,
            timestamp=self._now_ms(),
            test_name=test_name,
            variant=variant,
            data=dict(data or {}),
        )
        self._record(event)
        return event

    # --- Engagement detectors ---

    def handle_mouse_leave(self, client_y: float, client_x: float = 0) -> Optional[EngagementEvent]:
        """Fires `exit_intent` the first time the pointer leaves through the top edge."""
        if self._exit_intent_triggered or client_y > 0:
            return None
        self._exit_intent_triggered = True
        return self.track_engagement("exit_intent", {
            "mouse_position": {"x": client_x, "y": client_y},
            "time_on_page": self.time_on_page_ms(),
            "current_stage": self.session.current_stage,
        })

    def handle_scroll(self, scroll_y: float, scroll_height: float, viewport_height: float) -> List[EngagementEvent]:
        """
        Fires each scroll-depth milestone once.

        Calls inside the throttle window are skipped unless they cross a
        milestone not seen yet, so a fast scroll that stops inside the window
        still reports its final depth.
        """
        scrollable = scroll_height - viewport_height
        if scrollable <= 0:
            return []

        scroll_percent = math.floor(scroll_y / scrollable * 100 + 0.5)
        reached = [
            m for m in SCROLL_MILESTONES
            if scroll_percent >= m and m not in self._scroll_milestones_seen
        ]

        now = self._now_ms()
        throttled = self._last_scroll_ms is not None and now - self._last_scroll_ms < self.scroll_throttle_ms
        if throttled and not reached:
            return []
        self._last_scroll_ms = now
        self._max_scroll = max(self._max_scroll, scroll_percent)

        fired = []
        for milestone in reached:
            self._scroll_milestones_seen.add(milestone)
            fired.append(self.track_engagement("scroll_milestone", {
                "milestone": milestone,
                "max_scroll": self._max_scroll,
                "time_to_milestone": self.time_on_page_ms(),
            }))
        return fired

    def check_time_milestones(self) -> List[EngagementEvent]:
        """Fires each time-on-page milestone once."""
        time_on_page = self.time_on_page_ms() // 1000
        fired = []
        for milestone in TIME_MILESTONES:
            if time_on_page >= milestone and milestone not in self._time_milestones_seen:
                self._time_milestones_seen.add(milestone)
                fired.append(self.track_engagement("time_milestone", {
                    "milestone": milestone,
                    "total_time": time_on_page,
                    "current_stage": self.session.current_stage,
                }))
        return fired

    async def run_time_poller(self) -> None:
        while True:
            await asyncio.sleep(self.time_poll_interval)
            self.check_time_milestones()

    def start_time_poller(self) -> asyncio.Task:
        """Schedules the time-milestone poller on the running event loop."""
        if self._poller_task is None or self._poller_task.done():
            self._poller_task = asyncio.get_running_loop().create_task(self.run_time_poller())
        return self._poller_task

    # --- Heuristics ---

    def assess_lead_quality(self, result: ResultOrLevel = None) -> int:
        return heuristics.assess_lead_quality(
            time_on_page_seconds=self.time_on_page_ms() / 1000,
            result_level=_level_of(result),
            engagement_event_count=self.engagement_event_count(),
            utm_params=self.session.utm_params,
        )

    def assess_engagement_level(self) -> str:
        return heuristics.assess_engagement_level(
            time_on_page_seconds=self.time_on_page_ms() / 1000,
            engagement_event_count=self.engagement_event_count(),
            current_stage=self.session.current_stage,
        )

    # --- Shortcuts for specific conversions ---

    def track_consultation_click(
        self, result: ResultOrLevel = None, data: Optional[Mapping[str, Any]] = None
    ) -> Optional[ConversionEvent]:
        payload = dict(data or {})
        level = _level_of(result) or payload.get("result_level")
        if level:
            payload["result_level"] = level
        payload["conversion_type"] = "consultation"
        payload["lead_quality"] = self.assess_lead_quality(level)
        return self.track_conversion("consultation_click", payload)

    def track_learn_more_click(self, data: Optional[Mapping[str, Any]] = None) -> Optional[ConversionEvent]:
        payload = dict(data or {})
        payload["engagement_level"] = self.assess_engagement_level()
        return self.track_conversion("learn_more_click", payload)

    def track_external_navigation(
        self, url: str, data: Optional[Mapping[str, Any]] = None
    ) -> Optional[ConversionEvent]:
        payload = dict(data or {})
        payload["destination_url"] = url
        payload["navigation_type"] = "external"
        return self.track_conversion("external_link_click", payload)

    # --- Reporting ---

    def get_conversion_stats(self) -> ConversionStats:
        buffered = self.buffer.read()
        return ConversionStats(
            total_events=len(buffered),
            session_events=sum(1 for e in buffered if e.get("session_id") == self.session_id),
            conversion_events=sum(1 for e in buffered if e.get("category") == "conversion"),
            engagement_events=sum(1 for e in buffered if e.get("category") == "engagement"),
            current_stage=self.session.current_stage,
            time_on_page=self.time_on_page_ms(),
            session_id=self.session_id,
        )

    def generate_report(self) -> FunnelReport:
        """
        Snapshot of this session. `conversion_rate` counts conversion clicks
        over the single current session; it is not an aggregate rate.
        """
        stats = self.get_conversion_stats()
        events = list(self.session.events)

        conversions = sum(
            1 for e in events
            if isinstance(e, ConversionEvent) and e.event_type in CONVERSION_INTENT_EVENTS
        )
        total_sessions = 1
        conversion_rate = (conversions / total_sessions) * 100 if conversions else 0.0

        seen_stages = {e.stage_name for e in events if isinstance(e, FunnelStageEvent)}
        funnel_progress = {stage: stage in seen_stages for stage in FUNNEL_STAGES}

        return FunnelReport(
            session_id=self.session_id,
            conversion_rate=round(conversion_rate, 2),
            total_events=stats.total_events,
            engagement_score=self.engagement_event_count(),
            time_on_page=round(stats.time_on_page / 1000),
            current_stage=stats.current_stage,
            funnel_progress=funnel_progress,
            utm_params=self.session.utm_params,
            events=events,
            generated_at=datetime.now(timezone.utc),
        )

    # --- Teardown ---

    def cleanup(self) -> Optional[EngagementEvent]:
        """
        Ends the session: records `session_end`, reports the session duration,
        stops the poller and flushes the sink. Later calls are no-ops.
        """
        if self._ended:
            return None
        self._ended = True

        if self._poller_task is not None and not self._poller_task.done():
            self._poller_task.cancel()

        total_time = self.time_on_page_ms()
        event = self.track_engagement("session_end", {
            "total_time": total_time,
            "final_stage": self.session.current_stage,
            "total_events": len(self.session.events),
        })
        send_timing(self.sink, "session", "duration", total_time)
        flush_sink(self.sink)
        logger.info(f"Funnel session {self.session_id} ended at stage {self.session.current_stage}")
        return event
