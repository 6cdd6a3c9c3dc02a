# services/funnel_tracker/heuristics.py
# Coarse lead-quality and engagement scoring from session signals.

from typing import Mapping, Optional

from .definitions import ORGANIC_UTM_SOURCE

MAX_LEAD_QUALITY = 10

HIGH_MATURITY_LEVELS = ("L4", "L5")
MID_MATURITY_LEVELS = ("L2", "L3")


def _time_on_page_points(time_on_page_seconds: float) -> int:
    if time_on_page_seconds > 300:
        return 3
    if time_on_page_seconds > 120:
        return 2
    if time_on_page_seconds > 60:
        return 1
    return 0


def assess_lead_quality(
    time_on_page_seconds: float,
    result_level: Optional[str],
    engagement_event_count: int,
    utm_params: Optional[Mapping[str, str]],
) -> int:
    """
    Additive 0-10 score estimating how likely the visitor is to convert.

    Up to 3 points for time on page, 2 for having an assessment result, up to 2
    more for the maturity level, up to 3 for engagement events and 1 for
    direct or organic traffic.
    """
    score = _time_on_page_points(time_on_page_seconds)

    if result_level:
        score += 2
        if result_level in HIGH_MATURITY_LEVELS:
            score += 2
        elif result_level in MID_MATURITY_LEVELS:
            score += 1

    score += min(max(engagement_event_count, 0), 3)

    if not utm_params or utm_params.get("utm_source") == ORGANIC_UTM_SOURCE:
        score += 1

    return min(score, MAX_LEAD_QUALITY)


def assess_engagement_level(
    time_on_page_seconds: float,
    engagement_event_count: int,
    current_stage: int,
) -> str:
    """Three-tier classifier: 'high', 'medium' or 'low'."""
    if time_on_page_seconds > 180 and engagement_event_count > 3 and current_stage >= 6:
        return "high"
    if time_on_page_seconds > 60 and engagement_event_count > 1 and current_stage >= 4:
        return "medium"
    return "low"
