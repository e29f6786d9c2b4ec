"""Social engagement comparison (Instagram / Facebook) — engagement rate, gap threshold 1 point."""

from ..normalizer import usable
from ..vitals import finite
from .common import decide, fmt, tidy

THRESHOLD = 1

LABELS = {"instagram": "Instagram", "facebook": "Facebook"}


def _side(record: dict, platform: str) -> dict | None:
    social = usable(record.get(platform))
    if not social:
        return None
    profile = social.get("profile") or {}
    if finite(profile.get("avgEngagementRate")) is None:
        return None
    engagement = social.get("engagement") or {}
    return {
        **profile,
        "summary": dict(engagement.get("summary") or {}),
        "postingPattern": dict(engagement.get("postingPattern") or {}),
    }


def _versus(mine, theirs) -> dict | None:
    mine, theirs = finite(mine), finite(theirs)
    if mine is None or theirs is None:
        return None
    difference = mine - theirs
    return {
        "yours": mine,
        "competitor": theirs,
        "difference": tidy(difference),
        "winner": decide(difference),
    }


def compare(yours: dict, competitor: dict, platform: str = "instagram") -> dict | None:
    mine, theirs = _side(yours, platform), _side(competitor, platform)
    if mine is None or theirs is None:
        return None

    label = LABELS.get(platform, platform.title())
    engagement = _versus(mine["avgEngagementRate"], theirs["avgEngagementRate"])
    difference = engagement["difference"]
    notes = []

    if difference > THRESHOLD:
        notes.append(("strengths",
                      f"Higher {label} engagement rate ({fmt(mine['avgEngagementRate'])}% vs "
                      f"{fmt(theirs['avgEngagementRate'])}%)"))
    elif difference < -THRESHOLD:
        notes.append(("weaknesses",
                      f"Competitor's {label} audience engages more ({fmt(theirs['avgEngagementRate'])}% vs "
                      f"{fmt(mine['avgEngagementRate'])}%)"))
        best_days = theirs["postingPattern"].get("bestDays") or []
        if best_days:
            notes.append(("recommendations",
                          f"Test posting on {label} on {', '.join(str(day) for day in best_days[:3])}, when the competitor sees peak engagement"))
        else:
            notes.append(("recommendations",
                          f"Post more interactive {label} content (questions, polls, reels) to lift engagement"))

    return {
        "dimension": platform,
        "yours": mine,
        "competitor": theirs,
        "followers": _versus(mine.get("followers"), theirs.get("followers")),
        "interactions": _versus(
            mine["summary"].get("avgInteractionsPerPost"),
            theirs["summary"].get("avgInteractionsPerPost"),
        ),
        "engagement": engagement,
        "difference": difference,
        "winner": engagement["winner"],
        "notes": notes,
    }
