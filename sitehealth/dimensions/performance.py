"""Performance comparison — Lighthouse performance score, gap threshold 10 points."""

from ..normalizer import usable
from ..scorer import core_vitals_score
from ..vitals import finite
from .common import decide, fmt, tidy

THRESHOLD = 10


def _side(record: dict) -> dict | None:
    lighthouse = usable(record.get("lighthouse"))
    if not lighthouse:
        return None
    scores = lighthouse.get("categoryScores") or {}
    performance = finite(scores.get("performance"))
    if performance is None:
        return None

    mobile_score = None
    pagespeed = usable(record.get("pagespeed"))
    if pagespeed:
        lab = (pagespeed.get("mobile") or {}).get("labData") or {}
        mobile_score = lab.get("performanceScore")

    return {
        "performance": performance,
        "accessibility": finite(scores.get("accessibility")),
        "bestPractices": finite(scores.get("bestPractices")),
        "seo": finite(scores.get("seo")),
        "mobileScore": mobile_score,
        "coreVitalsScore": core_vitals_score(record),
    }


def compare(yours: dict, competitor: dict) -> dict | None:
    mine, theirs = _side(yours), _side(competitor)
    if mine is None or theirs is None:
        return None

    difference = mine["performance"] - theirs["performance"]
    gap = abs(difference)
    notes = []

    if difference > THRESHOLD:
        notes.append(("strengths",
                      f"Your site is significantly faster than the competitor ({fmt(gap)} points ahead)"))
    elif difference < -THRESHOLD:
        notes.append(("weaknesses",
                      f"Competitor's site is significantly faster ({fmt(gap)} points ahead)"))
        notes.append(("recommendations",
                      "Optimize images, reduce JavaScript, and improve server response times"))

    return {
        "dimension": "performance",
        "yours": mine,
        "competitor": theirs,
        "difference": tidy(difference),
        "gap": round(gap, 1),
        "winner": decide(difference),
        "notes": notes,
    }
