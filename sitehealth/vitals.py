"""
Threshold conversions from raw metrics to 0-100 ratings.

Core Web Vitals (Google thresholds):
  LCP  good <= 2500ms, poor > 4000ms
  FID  good <= 100ms,  poor > 300ms
  CLS  good <= 0.1,    poor > 0.25
"""

import math


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def finite(value):
    """Return value as a number, or None for missing / non-numeric / NaN."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return int(value) if isinstance(value, int) else number


def round_half_up(value: float) -> int:
    """Round like JavaScript's Math.round (halves go up)."""
    return int(math.floor(value + 0.5))


def _linear(value: float, good: float, poor: float) -> int:
    if value <= good:
        return 100
    if value <= poor:
        return round_half_up((poor - value) / (poor - good) * 100)
    return 0


def lcp_score(lcp_ms):
    lcp_ms = finite(lcp_ms)
    return None if lcp_ms is None else _linear(lcp_ms, 2500, 4000)


def fid_score(fid_ms):
    fid_ms = finite(fid_ms)
    return None if fid_ms is None else _linear(fid_ms, 100, 300)


def cls_score(cls):
    cls = finite(cls)
    return None if cls is None else _linear(cls, 0.1, 0.25)


def core_vitals_to_score(vitals: dict | None) -> dict | None:
    """Rate each available vital and average the ratings."""
    if not vitals:
        return None

    scores = {}
    for key, fn in (("lcp", lcp_score), ("fid", fid_score), ("cls", cls_score)):
        rating = fn(vitals.get(key))
        if rating is not None:
            scores[key] = rating

    values = list(scores.values())
    scores["average"] = round_half_up(sum(values) / len(values)) if values else None
    return scores


def bounce_rate_to_score(bounce_rate):
    """Lower bounce rate means a higher score."""
    bounce_rate = finite(bounce_rate)
    if bounce_rate is None:
        return None
    if bounce_rate <= 26:
        return 100
    if bounce_rate <= 40:
        return 85
    if bounce_rate <= 55:
        return 70
    if bounce_rate <= 70:
        return 50
    return 25


def session_duration_to_score(seconds):
    """Longer sessions score higher, saturating at three minutes."""
    seconds = finite(seconds)
    if seconds is None:
        return None
    if seconds >= 180:
        return 100
    if seconds >= 120:
        return 85
    if seconds >= 60:
        return 70
    if seconds >= 30:
        return 50
    return 25


def ctr_to_score(ctr_percent):
    ctr_percent = finite(ctr_percent)
    if ctr_percent is None:
        return None
    if ctr_percent >= 3:
        return 100
    if ctr_percent < 1:
        return 25
    return round_half_up(25 + (ctr_percent - 1) / 2 * 75)


def position_to_score(position):
    position = finite(position)
    if position is None:
        return None
    if position <= 10:
        return 100
    if position > 30:
        return 25
    return round_half_up(100 - (position - 10) / 20 * 75)


IMPRESSIONS_FOR_FULL_SCORE = 10_000


def impressions_to_score(impressions):
    impressions = finite(impressions)
    if impressions is None:
        return None
    return round_half_up(clamp(impressions / IMPRESSIONS_FOR_FULL_SCORE * 100))


def content_velocity(posts_per_month) -> str:
    posts_per_month = finite(posts_per_month) or 0
    if posts_per_month >= 10:
        return "high"
    if posts_per_month >= 4:
        return "medium"
    if posts_per_month >= 1:
        return "low"
    return "minimal"
