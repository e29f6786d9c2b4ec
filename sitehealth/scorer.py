"""
Composite health scorer — builds the site health score from a normalized record.

Weights (enhanced):
  technical: 25%, userExperience: 20%, seoHealth: 20%,
  searchVisibility: 20%, technicalSEO: 15%
Weights (basic):
  technical: 40%, userExperience: 35%, seoHealth: 25%

Missing categories drop out of the weighted sum without the remaining
weights being scaled up, so a partial record cannot reach 100.
"""

from .normalizer import usable
from .vitals import (
    bounce_rate_to_score,
    clamp,
    core_vitals_to_score,
    ctr_to_score,
    finite,
    impressions_to_score,
    position_to_score,
    round_half_up,
    session_duration_to_score,
)


WEIGHTS = {
    "enhanced": {
        "technical": 0.25,
        "userExperience": 0.20,
        "seoHealth": 0.20,
        "searchVisibility": 0.20,
        "technicalSEO": 0.15,
    },
    "basic": {
        "technical": 0.40,
        "userExperience": 0.35,
        "seoHealth": 0.25,
    },
}

TECHNICAL_SEO_WEIGHTS = {
    "robotsTxt": 0.20,
    "sitemap": 0.20,
    "ssl": 0.25,
    "metaTags": 0.25,
    "structuredData": 0.10,
}

INTERPRETATIONS = [
    (90, "excellent", "Top 10% performance"),
    (80, "good", "Above average with minor improvements needed"),
    (70, "fair", "Several optimization opportunities"),
    (60, "poor", "Significant issues need addressing"),
    (0, "critical", "Major problems affecting user experience"),
]


def _weighted(terms) -> int | None:
    """Sum of value*weight over present values, clamped to 0-100."""
    present = [value * weight for value, weight in terms if value is not None]
    if not present:
        return None
    return round_half_up(clamp(sum(present)))


def _lighthouse_score(record: dict, key: str):
    lighthouse = usable(record.get("lighthouse"))
    if not lighthouse:
        return None
    return finite(lighthouse["categoryScores"].get(key))


def vitals_source(record: dict) -> dict | None:
    """Field data (real users) when available, else lab data."""
    pagespeed = usable(record.get("pagespeed"))
    if not pagespeed:
        return None
    mobile = pagespeed.get("mobile") or {}
    return mobile.get("fieldData") or mobile.get("labData")


def core_vitals_score(record: dict) -> int | None:
    scores = core_vitals_to_score(vitals_source(record))
    return scores["average"] if scores else None


def technical_score(record: dict) -> int | None:
    return _weighted([
        (_lighthouse_score(record, "performance"), 0.6),
        (core_vitals_score(record), 0.4),
    ])


def bounce_rate(analytics: dict):
    if (analytics.get("organicSessions") or 0) > 10:
        return analytics.get("organicBounceRate")
    return analytics.get("bounceRate")


def user_experience_score(record: dict) -> int | None:
    analytics = usable(record.get("analytics"))
    if not analytics:
        return None
    return _weighted([
        (bounce_rate_to_score(bounce_rate(analytics)), 0.6),
        (session_duration_to_score(analytics.get("avgSessionDuration")), 0.4),
    ])


def seo_health_score(record: dict) -> int | None:
    return _weighted([
        (_lighthouse_score(record, "seo"), 0.6),
        (_lighthouse_score(record, "accessibility"), 0.4),
    ])


def search_visibility_score(record: dict) -> int | None:
    console = usable(record.get("searchConsole"))
    if not console:
        return None
    scores = [
        score for score in (
            ctr_to_score(console.get("averageCTR")),
            position_to_score(console.get("averagePosition")),
            impressions_to_score(console.get("totalImpressions")),
        )
        if score is not None
    ]
    if not scores:
        return None
    return round_half_up(clamp(sum(scores) / len(scores)))


def technical_seo_score(record: dict) -> int | None:
    checks = usable(record.get("technicalSEO"))
    if not checks:
        return None
    return _weighted([
        ((checks.get(name) or {}).get("score"), weight)
        for name, weight in TECHNICAL_SEO_WEIGHTS.items()
    ])


CATEGORY_SCORERS = {
    "technical": technical_score,
    "userExperience": user_experience_score,
    "seoHealth": seo_health_score,
    "searchVisibility": search_visibility_score,
    "technicalSEO": technical_seo_score,
}


def assess_data_quality(record: dict, mode: str = "enhanced") -> dict:
    analytics = usable(record.get("analytics"))
    sources = {
        "lighthouse": bool(usable(record.get("lighthouse"))),
        "pagespeed": bool(usable(record.get("pagespeed"))),
        "analytics": bool(analytics) and (analytics.get("totalSessions") or 0) > 0,
    }
    if mode == "enhanced":
        sources["searchConsole"] = bool(usable(record.get("searchConsole")))
        sources["technicalSEO"] = bool(usable(record.get("technicalSEO")))

    available = sum(1 for present in sources.values() if present)
    completeness = round_half_up(available / len(sources) * 100)

    if completeness >= 80:
        level = "high"
    elif completeness >= 60:
        level = "medium"
    else:
        level = "limited"

    return {"level": level, "sources": sources, "completeness": completeness}


def interpret(score: int | None) -> dict | None:
    if score is None:
        return None
    for floor, level, description in INTERPRETATIONS:
        if score >= floor:
            return {"level": level, "description": description}
    return None


def score_health(record: dict | None, mode: str = "enhanced") -> dict:
    """Score a normalized record in "basic" or "enhanced" mode."""
    if mode not in WEIGHTS:
        raise ValueError(f"Unknown scoring mode: {mode}")

    record = record or {}
    weights = WEIGHTS[mode]
    breakdown = {name: CATEGORY_SCORERS[name](record) for name in weights}

    present = [breakdown[name] * weight for name, weight in weights.items() if breakdown[name] is not None]
    overall = round_half_up(clamp(sum(present))) if present else None

    return {
        "overall": overall,
        "breakdown": breakdown,
        "weights": dict(weights),
        "mode": mode,
        "coreVitalsScore": core_vitals_score(record),
        "dataQuality": assess_data_quality(record, mode),
        "interpretation": interpret(overall),
    }
