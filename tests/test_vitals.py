import math

import pytest

from sitehealth import vitals


@pytest.mark.parametrize("lcp, expected", [(1800, 100), (2500, 100), (3250, 50), (4000, 0), (6000, 0)])
def test_lcp_thresholds(lcp, expected):
    assert vitals.lcp_score(lcp) == expected


def test_fid_and_cls_thresholds():
    assert vitals.fid_score(100) == 100
    assert vitals.fid_score(200) == 50
    assert vitals.fid_score(301) == 0
    assert vitals.cls_score(0.05) == 100
    assert vitals.cls_score(0.175) == 50
    assert vitals.cls_score(0.3) == 0


def test_core_vitals_average_uses_available_metrics_only():
    scores = vitals.core_vitals_to_score({"lcp": 2000, "fid": None, "cls": 0.05})
    assert scores == {"lcp": 100, "cls": 100, "average": 100}


def test_core_vitals_without_data():
    assert vitals.core_vitals_to_score(None) is None
    assert vitals.core_vitals_to_score({"lcp": None})["average"] is None


def test_bounce_and_duration_mappings_are_monotonic():
    assert [vitals.bounce_rate_to_score(b) for b in (20, 26, 40, 55, 70, 90)] == [100, 100, 85, 70, 50, 25]
    assert [vitals.session_duration_to_score(s) for s in (10, 30, 60, 120, 180, 600)] == [25, 50, 70, 85, 100, 100]
    assert vitals.bounce_rate_to_score(None) is None


def test_search_console_mappings():
    assert vitals.ctr_to_score(3) == 100
    assert vitals.ctr_to_score(0.5) == 25
    assert vitals.ctr_to_score(2) == 63
    assert vitals.position_to_score(8) == 100
    assert vitals.position_to_score(20) == 63
    assert vitals.position_to_score(31) == 25
    assert vitals.impressions_to_score(5000) == 50
    assert vitals.impressions_to_score(250000) == 100


def test_content_velocity_buckets():
    assert vitals.content_velocity(12) == "high"
    assert vitals.content_velocity(4) == "medium"
    assert vitals.content_velocity(1) == "low"
    assert vitals.content_velocity(0) == "minimal"
    assert vitals.content_velocity(None) == "minimal"


def test_finite_rejects_nan_and_booleans():
    assert vitals.finite(float("nan")) is None
    assert vitals.finite(math.inf) is None
    assert vitals.finite(True) is None
    assert vitals.finite("abc") is None
    assert vitals.finite("12.5") == 12.5
    assert vitals.finite(7) == 7


def test_round_half_up_matches_dashboard_rounding():
    assert vitals.round_half_up(62.5) == 63
    assert vitals.round_half_up(20.4) == 20
