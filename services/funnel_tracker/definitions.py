# services/funnel_tracker/definitions.py
# Static configuration for funnel stages, conversion events and engagement milestones.

# --- Funnel stages ---
# Ordered checkpoints from first page view to completed conversion.
FUNNEL_STAGES = {
    "page_view": {"stage": 1, "name": "页面加载"},
    "assessment_start": {"stage": 2, "name": "开始测评"},
    "assessment_progress": {"stage": 3, "name": "测评进行中"},
    "assessment_complete": {"stage": 4, "name": "完成测评"},
    "result_view": {"stage": 5, "name": "查看结果"},
    "cta_view": {"stage": 6, "name": "查看转化引导"},
    "conversion_intent": {"stage": 7, "name": "转化意向"},
    "conversion_complete": {"stage": 8, "name": "转化完成"},
}

FIRST_STAGE = 1
LAST_STAGE = 8

# --- Conversion events ---
CONVERSION_EVENTS = {
    "consultation_click": {
        "category": "conversion",
        "action": "consultation_request",
        "value": 100, # estimated value
        "priority": "high",
    },
    "learn_more_click": {
        "category": "engagement",
        "action": "learn_more",
        "value": 20,
        "priority": "medium",
    },
    "restart_click": {
        "category": "engagement",
        "action": "restart_assessment",
        "value": 10,
        "priority": "low",
    },
    "share_click": {
        "category": "viral",
        "action": "share_result",
        "value": 30,
        "priority": "medium",
    },
    "external_link_click": {
        "category": "conversion",
        "action": "external_navigation",
        "value": 50,
        "priority": "high",
    },
}

# Events that also move the visitor to the conversion_intent stage
CONVERSION_INTENT_EVENTS = ("consultation_click", "external_link_click")

# --- Engagement milestones ---
SCROLL_MILESTONES = (25, 50, 75, 90, 100) # percent of scrollable height
TIME_MILESTONES = (30, 60, 120, 300, 600) # seconds on page

TIME_POLL_INTERVAL_SECONDS = 10.0
SCROLL_THROTTLE_MS = 100

# --- Attribution ---
UTM_PARAMS = ("utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content")
ORGANIC_UTM_SOURCE = "organic"

# --- Local event buffer ---
EVENT_BUFFER_KEY = "conversion_events"
EVENT_BUFFER_CAPACITY = 100
