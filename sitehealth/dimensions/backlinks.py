"""Backlink comparison — total backlinks, gap threshold 100 links."""

from ..normalizer import usable
from ..vitals import finite
from .common import decide, fmt, tidy

THRESHOLD = 100


def _side(record: dict) -> dict | None:
    backlinks = usable(record.get("backlinks"))
    if not backlinks:
        return None
    total = finite(backlinks.get("totalBacklinks"))
    if total is None:
        return None
    return {
        "totalBacklinks": total,
        "referringDomains": finite(backlinks.get("referringDomains")),
    }


def compare(yours: dict, competitor: dict) -> dict | None:
    mine, theirs = _side(yours), _side(competitor)
    if mine is None or theirs is None:
        return None

    difference = mine["totalBacklinks"] - theirs["totalBacklinks"]
    notes = []

    if difference > THRESHOLD:
        notes.append(("strengths",
                      f"You have {fmt(difference)} more backlinks than the competitor"))
    elif difference < -THRESHOLD:
        notes.append(("weaknesses",
                      f"Competitor has {fmt(-difference)} more backlinks"))
        notes.append(("recommendations",
                      "Build authoritative backlinks through guest posts, digital PR and partner sites"))

    return {
        "dimension": "backlinks",
        "yours": mine,
        "competitor": theirs,
        "difference": tidy(difference),
        "winner": decide(difference),
        "notes": notes,
    }
