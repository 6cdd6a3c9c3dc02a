import itertools

import pytest

from services.funnel_tracker.heuristics import assess_engagement_level, assess_lead_quality


@pytest.mark.parametrize("seconds, expected", [(0, 0), (60, 0), (61, 1), (121, 2), (301, 3)])
def test_lead_quality_time_points(seconds, expected):
    # paid traffic, no result, no engagement: only time counts
    assert assess_lead_quality(seconds, None, 0, {"utm_source": "google"}) == expected

@pytest.mark.parametrize("level, expected", [("L1", 2), ("L2", 3), ("L3", 3), ("L4", 4), ("L5", 4), (None, 0)])
def test_lead_quality_result_points(level, expected):
    assert assess_lead_quality(0, level, 0, {"utm_source": "google"}) == expected

@pytest.mark.parametrize("utm, expected", [
    (None, 1),
    ({}, 1),
    ({"utm_source": "organic"}, 1),
    ({"utm_source": "google"}, 0),
    ({"utm_medium": "email"}, 0),
])
def test_lead_quality_traffic_source(utm, expected):
    assert assess_lead_quality(0, None, 0, utm) == expected

def test_lead_quality_engagement_points_are_capped():
    assert assess_lead_quality(0, None, 2, {"utm_source": "x"}) == 2
    assert assess_lead_quality(0, None, 50, {"utm_source": "x"}) == 3

def test_lead_quality_always_within_bounds():
    grid = itertools.product(
        [0, 45, 90, 200, 1000],
        [None, "L1", "L3", "L5", "L9"],
        [0, 1, 3, 10],
        [None, {"utm_source": "organic"}, {"utm_source": "ads"}],
    )
    for seconds, level, count, utm in grid:
        quality = assess_lead_quality(seconds, level, count, utm)
        assert isinstance(quality, int)
        assert 0 <= quality <= 10

@pytest.mark.parametrize("seconds, count, stage, expected", [
    (200, 4, 6, "high"),
    (200, 4, 5, "medium"),
    (181, 3, 8, "medium"),
    (61, 2, 4, "medium"),
    (60, 5, 8, "low"),
    (300, 1, 8, "low"),
    (300, 5, 3, "low"),
])
def test_engagement_level(seconds, count, stage, expected):
    assert assess_engagement_level(seconds, count, stage) == expected
