import json

import pytest

from services.funnel_tracker.definitions import EVENT_BUFFER_KEY, FUNNEL_STAGES
from services.funnel_tracker.models import ConversionEvent, EngagementEvent, FunnelStageEvent
from services.funnel_tracker.tracker import ConversionTracker, extract_utm_params, generate_session_id
from services.maturity_engine.engine import MaturityEngine
from src.storage import MemoryStorage


@pytest.fixture
def tracker(sink, storage, clock):
    return ConversionTracker(sink=sink, storage=storage, clock=clock)


def buffered(storage):
    return json.loads(storage.get(EVENT_BUFFER_KEY) or "[]")


# --- Session setup ---

def test_generate_session_id_format():
    session_id = generate_session_id(1700000000123)
    prefix, ms, suffix = session_id.split("_")
    assert prefix == "conv"
    assert ms == "1700000000123"
    assert len(suffix) == 9

def test_new_session_defaults(tracker, clock):
    assert tracker.current_stage == 1
    assert tracker.events == []
    assert tracker.session_id.startswith(f"conv_{int(clock() * 1000)}_")

def test_session_ids_are_unique(clock):
    assert ConversionTracker(clock=clock).session_id != ConversionTracker(clock=clock).session_id

def test_explicit_session_id(clock):
    assert ConversionTracker(session_id="fixed", clock=clock).session_id == "fixed"

@pytest.mark.parametrize("query, expected", [
    ("?utm_source=google&utm_medium=cpc&foo=1", {"utm_source": "google", "utm_medium": "cpc"}),
    ("utm_campaign=spring", {"utm_campaign": "spring"}),
    ("foo=1&bar=2", None),
    ("", None),
    (None, None),
])
def test_extract_utm_params(query, expected):
    assert extract_utm_params(query) == expected

def test_start_records_page_view(sink, clock):
    tracker = ConversionTracker(
        sink=sink,
        clock=clock,
        query_string="utm_source=newsletter",
        referrer="https://example.org",
        user_agent="pytest",
    )
    session_id = tracker.start({"page": "/assessment"})

    assert session_id == tracker.session_id
    assert len(tracker.events) == 1
    event = tracker.events[0]
    assert isinstance(event, FunnelStageEvent)
    assert event.stage_name == "page_view"
    assert event.data["utm_params"] == {"utm_source": "newsletter"}
    assert event.data["referrer"] == "https://example.org"
    assert event.data["page"] == "/assessment"

    name, payload = sink.events[0]
    assert name == "funnel_stage"
    assert payload["session_id"] == session_id
    assert payload["stage"] == 1
    assert payload["user_agent"] == "pytest"


# --- Funnel stages ---

def test_advance_logs_every_call_but_never_rewinds(tracker, sink):
    forward = tracker.advance("assessment_complete")
    backward = tracker.advance("assessment_start", {"source": "restart"})

    assert tracker.current_stage == 4
    assert len(tracker.events) == 2
    assert forward.stage == 4
    assert backward.stage == 2
    assert backward.data == {"source": "restart"}
    assert [name for name, _ in sink.events] == ["funnel_stage", "funnel_stage"]

def test_advance_unknown_stage(tracker):
    assert tracker.advance("checkout") is None
    assert tracker.current_stage == 1
    assert tracker.events == []

def test_stage_never_moves_backwards(tracker):
    tracker.track_funnel_stage("assessment_complete")
    tracker.track_funnel_stage("assessment_start")

    assert tracker.current_stage == 4
    assert len(tracker.events) == 2
    assert [e.stage_name for e in tracker.events] == ["assessment_complete", "assessment_start"]

def test_stage_is_monotonic_over_any_sequence(tracker):
    sequence = ["result_view", "page_view", "cta_view", "assessment_progress", "conversion_complete", "assessment_start"]
    seen = []
    for stage_name in sequence:
        tracker.track_funnel_stage(stage_name)
        seen.append(tracker.current_stage)
    assert seen == sorted(seen)
    assert tracker.current_stage == FUNNEL_STAGES["conversion_complete"]["stage"]

def test_unknown_stage_is_ignored(tracker, sink):
    assert tracker.track_funnel_stage("checkout") is None
    assert tracker.current_stage == 1
    assert tracker.events == []
    assert sink.events == []

def test_stage_event_time_since_start(tracker, clock):
    clock.advance(12.5)
    event = tracker.track_funnel_stage("assessment_start")
    assert event.time_since_start == 12500
    assert event.stage_display_name == FUNNEL_STAGES["assessment_start"]["name"]


# --- Conversions ---

def test_unknown_conversion_event(tracker, sink, storage, caplog):
    assert tracker.track_conversion("foo") is None
    assert tracker.events == []
    assert sink.events == []
    assert buffered(storage) == []
    assert "Unknown conversion event: foo" in caplog.text

def test_conversion_is_buffered(tracker, storage):
    event = tracker.track_conversion("share_click", {"channel": "wechat"})

    assert isinstance(event, ConversionEvent)
    assert event.category == "viral"
    assert event.value == 30
    assert tracker.current_stage == 1 # share is not a conversion intent

    stored = buffered(storage)
    assert len(stored) == 1
    assert stored[0]["event_type"] == "share_click"
    assert stored[0]["session_id"] == tracker.session_id
    assert stored[0]["channel"] == "wechat"

@pytest.mark.parametrize("event_type", ["consultation_click", "external_link_click"])
def test_intent_conversions_advance_to_conversion_intent(tracker, sink, event_type):
    tracker.track_conversion(event_type)

    assert tracker.current_stage == FUNNEL_STAGES["conversion_intent"]["stage"]
    assert len(tracker.events) == 2
    stage_event = tracker.events[1]
    assert stage_event.stage_name == "conversion_intent"
    assert stage_event.data == {"trigger_event": event_type}
    assert [name for name, _ in sink.events] == [event_type, "funnel_stage"]

def test_data_cannot_override_core_fields(tracker, storage):
    tracker.track_conversion("learn_more_click", {"session_id": "spoofed", "value": 9999})
    stored = buffered(storage)[0]
    assert stored["session_id"] == tracker.session_id
    assert stored["value"] == 20

def test_storage_quota_does_not_break_tracking(sink, clock):
    tracker = ConversionTracker(sink=sink, storage=MemoryStorage(quota_bytes=10), clock=clock)
    event = tracker.track_conversion("restart_click")
    assert event is not None
    assert len(tracker.events) == 1
    assert tracker.get_conversion_stats().total_events == 0

def test_buffer_capacity_is_respected(sink, storage, clock):
    tracker = ConversionTracker(sink=sink, storage=storage, clock=clock, buffer_capacity=3)
    for _ in range(5):
        tracker.track_conversion("restart_click")
    assert len(buffered(storage)) == 3


# --- Sink handling ---

def test_failing_sink_is_swallowed(storage, clock, caplog):
    class BrokenSink:
        def track_custom_event(self, name, payload):
            raise RuntimeError("network down")

    tracker = ConversionTracker(sink=BrokenSink(), storage=storage, clock=clock)
    event = tracker.track_engagement("scroll_milestone")

    assert event in tracker.events
    assert "network down" in caplog.text

def test_sink_falls_back_to_track_event(storage, clock):
    class LegacySink:
        def __init__(self):
            self.calls = []

        def track_event(self, name, payload):
            self.calls.append(name)

    legacy = LegacySink()
    tracker = ConversionTracker(sink=legacy, storage=storage, clock=clock)
    tracker.track_ab_test("cta_copy", "B")
    assert legacy.calls == ["ab_test"]
    assert tracker.events[0].variant == "B"

def test_tracking_without_sink(storage, clock):
    tracker = ConversionTracker(storage=storage, clock=clock)
    tracker.start()
    tracker.track_conversion("consultation_click")
    assert tracker.current_stage == 7


# --- Engagement detectors ---

def test_exit_intent_fires_once(tracker):
    assert tracker.handle_mouse_leave(client_y=15) is None
    event = tracker.handle_mouse_leave(client_y=0, client_x=300)
    assert event.engagement_type == "exit_intent"
    assert event.data["mouse_position"] == {"x": 300, "y": 0}
    assert tracker.handle_mouse_leave(client_y=-5) is None
    assert tracker.engagement_event_count() == 1

def test_scroll_milestones_fire_once_and_throttle(tracker, clock):
    fired = tracker.handle_scroll(scroll_y=300, scroll_height=2000, viewport_height=1000)
    assert [e.data["milestone"] for e in fired] == [25]

    clock.advance(0.05) # inside the throttle window, nothing new crossed
    assert tracker.handle_scroll(scroll_y=400, scroll_height=2000, viewport_height=1000) == []

    clock.advance(0.2)
    fired = tracker.handle_scroll(scroll_y=1000, scroll_height=2000, viewport_height=1000)
    assert [e.data["milestone"] for e in fired] == [50, 75, 90, 100]
    assert fired[-1].data["max_scroll"] == 100

    clock.advance(0.2)
    assert tracker.handle_scroll(scroll_y=0, scroll_height=2000, viewport_height=1000) == []
    assert tracker.engagement_event_count() == 5

def test_fast_scroll_to_bottom_reports_final_depth(tracker, clock):
    tracker.handle_scroll(scroll_y=500, scroll_height=2000, viewport_height=1000)
    clock.advance(0.05) # stops at the bottom inside the throttle window
    fired = tracker.handle_scroll(scroll_y=1000, scroll_height=2000, viewport_height=1000)

    milestones = [e.data["milestone"] for e in tracker.events]
    assert milestones == [25, 50, 75, 90, 100]
    assert [e.data["milestone"] for e in fired] == [75, 90, 100]

def test_scroll_on_unscrollable_page(tracker):
    assert tracker.handle_scroll(scroll_y=0, scroll_height=800, viewport_height=800) == []
    assert tracker.events == []

def test_time_milestones_fire_once(tracker, clock):
    assert tracker.check_time_milestones() == []

    clock.advance(65)
    assert [e.data["milestone"] for e in tracker.check_time_milestones()] == [30, 60]
    assert tracker.check_time_milestones() == []

    clock.advance(600)
    fired = tracker.check_time_milestones()
    assert [e.data["milestone"] for e in fired] == [120, 300, 600]
    assert fired[0].data["total_time"] == 665


# --- Heuristics ---

def test_lead_quality_from_result(tracker, clock):
    result = MaturityEngine().compute_result({"tech_awareness": 4, "workflow_integration": 4})
    clock.advance(130)
    tracker.track_engagement("exit_intent")
    tracker.track_engagement("scroll_milestone")

    # 2 (time) + 2 (result) + 2 (L4) + 2 (engagement) + 1 (no utm)
    assert tracker.assess_lead_quality(result) == 9
    assert tracker.assess_lead_quality("L4") == 9
    assert tracker.assess_lead_quality() == 5

def test_lead_quality_is_capped(tracker, clock):
    clock.advance(400)
    for _ in range(6):
        tracker.track_engagement("scroll_milestone")
    assert tracker.assess_lead_quality("L5") == 10

def test_lead_quality_paid_traffic(sink, clock):
    tracker = ConversionTracker(sink=sink, clock=clock, query_string="utm_source=google")
    assert tracker.assess_lead_quality() == 0

def test_engagement_level(tracker, clock):
    assert tracker.assess_engagement_level() == "low"

    clock.advance(200)
    tracker.track_funnel_stage("cta_view")
    for _ in range(4):
        tracker.track_engagement("scroll_milestone")
    assert tracker.assess_engagement_level() == "high"


# --- Conversion shortcuts ---

def test_track_consultation_click(tracker, storage):
    event = tracker.track_consultation_click("L3", {"button": "hero"})
    assert event.event_type == "consultation_click"
    assert event.data["result_level"] == "L3"
    assert event.data["conversion_type"] == "consultation"
    assert 0 <= event.data["lead_quality"] <= 10
    assert event.data["button"] == "hero"
    assert tracker.current_stage == 7

def test_track_learn_more_click(tracker):
    event = tracker.track_learn_more_click()
    assert event.event_type == "learn_more_click"
    assert event.data["engagement_level"] == "low"

def test_track_external_navigation(tracker):
    event = tracker.track_external_navigation("https://partner.example.com")
    assert event.data["destination_url"] == "https://partner.example.com"
    assert event.data["navigation_type"] == "external"
    assert tracker.current_stage == 7


# --- Reporting ---

def test_conversion_stats_count_own_session(storage, clock):
    earlier = ConversionTracker(storage=storage, clock=clock)
    earlier.track_conversion("share_click")

    tracker = ConversionTracker(storage=storage, clock=clock)
    tracker.track_conversion("consultation_click")
    tracker.track_conversion("learn_more_click")

    stats = tracker.get_conversion_stats()
    assert stats.total_events == 3
    assert stats.session_events == 2
    assert stats.conversion_events == 1
    assert stats.engagement_events == 1
    assert stats.current_stage == 7

def test_generate_report(tracker, clock):
    tracker.start()
    tracker.track_funnel_stage("assessment_start")
    tracker.track_engagement("exit_intent")
    clock.advance(42)
    tracker.track_conversion("consultation_click")

    report = tracker.generate_report()

    assert report.session_id == tracker.session_id
    assert report.conversion_rate == 100.0
    assert report.total_events == 1
    assert report.engagement_score == 1
    assert report.time_on_page == 42
    assert report.current_stage == 7
    assert report.funnel_progress["page_view"] is True
    assert report.funnel_progress["conversion_intent"] is True
    assert report.funnel_progress["result_view"] is False
    assert list(report.funnel_progress) == list(FUNNEL_STAGES)
    assert len(report.events) == 5

def test_report_without_conversions(tracker):
    tracker.start()
    report = tracker.generate_report()
    assert report.conversion_rate == 0.0
    assert report.total_events == 0


# --- Cleanup ---

def test_cleanup_is_idempotent(tracker, sink, clock):
    tracker.start()
    clock.advance(90)

    event = tracker.cleanup()

    assert isinstance(event, EngagementEvent)
    assert event.engagement_type == "session_end"
    assert event.data["total_time"] == 90000
    assert event.data["final_stage"] == 1
    assert sink.timings == [("session", "duration", 90000)]
    assert sink.flushed == 1

    assert tracker.cleanup() is None
    assert len(sink.timings) == 1
    assert sink.flushed == 1

def test_report_survives_foreign_buffer_entries(storage, clock):
    storage.set(EVENT_BUFFER_KEY, json.dumps([1, "x", {"session_id": "other", "category": "conversion"}]))
    tracker = ConversionTracker(storage=storage, clock=clock)
    tracker.track_conversion("consultation_click")

    report = tracker.generate_report()

    assert report.total_events == 2
    stats = tracker.get_conversion_stats()
    assert stats.session_events == 1
    assert stats.conversion_events == 2
