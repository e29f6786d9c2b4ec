"""
Traffic comparison — monthly visits, gap threshold 1000 visits.

`difference` is competitor minus yours here (unlike the other dimensions),
so a positive difference means the competitor is ahead. The dimension is
kept with 'N/A' placeholders when only one side has data.
"""

from ..normalizer import usable
from ..vitals import finite
from .common import NOT_AVAILABLE, decide, fmt, or_na, tidy

THRESHOLD = 1000


def _metrics(record: dict) -> dict | None:
    traffic = usable(record.get("traffic"))
    if not traffic or not traffic.get("success", True):
        return None
    metrics = traffic.get("metrics") or {}
    if finite(metrics.get("monthlyVisits")) is None:
        return None
    return {**metrics, "source": traffic.get("source")}


def _side(metrics: dict | None) -> dict:
    metrics = metrics or {}
    return {
        "monthlyVisits": or_na(metrics.get("monthlyVisits")),
        "avgVisitDuration": or_na(metrics.get("avgVisitDuration")),
        "pagesPerVisit": or_na(metrics.get("pagesPerVisit")),
        "bounceRate": or_na(metrics.get("bounceRate")),
        "source": or_na(metrics.get("source")),
    }


def compare(yours: dict, competitor: dict) -> dict | None:
    mine, theirs = _metrics(yours), _metrics(competitor)
    if mine is None and theirs is None:
        return None

    result = {
        "dimension": "traffic",
        "yours": _side(mine),
        "competitor": _side(theirs),
        "difference": NOT_AVAILABLE,
        "winner": "tie",
        "notes": [],
    }
    if mine is None or theirs is None:
        return result

    difference = theirs["monthlyVisits"] - mine["monthlyVisits"]
    result["difference"] = tidy(difference)
    result["winner"] = decide(-difference)

    if difference > THRESHOLD:
        result["notes"].append(("weaknesses",
                                f"Competitor receives {fmt(difference)} more monthly visits"))
        result["notes"].append(("opportunities",
                                "Target the competitor's top traffic sources to close the visit gap"))
    elif difference < -THRESHOLD:
        result["notes"].append(("strengths",
                                f"Your site receives {fmt(-difference)} more monthly visits than the competitor"))

    return result
