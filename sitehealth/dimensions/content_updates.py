"""Content freshness comparison — recent updates (RSS + sitemap), gap threshold 3."""

from ..normalizer import usable
from ..vitals import finite
from .common import NOT_AVAILABLE, decide, fmt, or_na, tidy

THRESHOLD = 3

FIELDS = (
    "recentActivityCount", "averagePostsPerMonth", "updateFrequency",
    "contentVelocity", "isActive", "lastContentDate",
)


def _activity(record: dict) -> dict | None:
    updates = usable(record.get("contentUpdates"))
    if not updates:
        return None
    activity = updates.get("contentActivity") or {}
    if finite(activity.get("recentActivityCount")) is None:
        return None
    return activity


def _side(activity: dict | None) -> dict:
    activity = activity or {}
    return {field: or_na(activity.get(field)) for field in FIELDS}


def _insight(more_active: str, mine: dict, theirs: dict) -> str:
    if more_active == "competitor":
        return (
            f"Your competitor is more active with {theirs['recentActivityCount']} recent updates "
            f"vs your {mine['recentActivityCount']}. Consider increasing your content publishing "
            f"frequency to {theirs.get('averagePostsPerMonth') or 0} posts per month."
        )
    if more_active == "user":
        return "You're publishing more consistently than your competitor. Maintain this momentum!"
    return "Both sites have similar content update frequency. Focus on quality and engagement metrics."


def compare(yours: dict, competitor: dict) -> dict | None:
    mine, theirs = _activity(yours), _activity(competitor)
    if mine is None and theirs is None:
        return None

    result = {
        "dimension": "contentUpdates",
        "yours": _side(mine),
        "competitor": _side(theirs),
        "difference": NOT_AVAILABLE,
        "winner": "tie",
        "moreActive": NOT_AVAILABLE,
        "contentGap": NOT_AVAILABLE,
        "insight": None,
        "notes": [],
    }
    if mine is None or theirs is None:
        return result

    difference = mine["recentActivityCount"] - theirs["recentActivityCount"]
    winner = decide(difference)
    more_active = {"yours": "user", "competitor": "competitor"}.get(winner, "equal")

    result.update({
        "difference": tidy(difference),
        "winner": winner,
        "moreActive": more_active,
        "contentGap": {
            "postsPerMonthDiff": tidy(
                (theirs.get("averagePostsPerMonth") or 0) - (mine.get("averagePostsPerMonth") or 0)
            ),
            "recentActivityDiff": tidy(-difference),
        },
        "insight": _insight(more_active, mine, theirs),
    })

    if difference > THRESHOLD:
        result["notes"].append(("strengths",
                                f"You publish more frequently than the competitor ({fmt(difference)} more recent updates)"))
    elif difference < -THRESHOLD:
        result["notes"].append(("weaknesses",
                                f"Competitor is more active with {fmt(theirs['recentActivityCount'])} "
                                f"recent updates vs your {fmt(mine['recentActivityCount'])}"))
        result["notes"].append(("recommendations",
                                f"Increase publishing frequency to about {fmt(theirs.get('averagePostsPerMonth') or 0)} posts per month"))

    return result
