"""Technology stack comparison — descriptive, decided only by analytics tooling."""

from ..normalizer import usable


def _side(record: dict) -> dict | None:
    scan = usable(record.get("puppeteer"))
    if not scan:
        return None
    tech = scan.get("technology") or {}
    return {
        "cms": tech.get("cms") or "Unknown",
        "frameworks": list(tech.get("frameworks") or []),
        "analytics": list(tech.get("analytics") or []),
        "thirdPartyScripts": tech.get("thirdPartyScripts") or 0,
    }


def compare(yours: dict, competitor: dict) -> dict | None:
    mine, theirs = _side(yours), _side(competitor)
    if mine is None or theirs is None:
        return None

    notes = []
    winner = "tie"
    if mine["analytics"] and not theirs["analytics"]:
        winner = "yours"
    elif theirs["analytics"] and not mine["analytics"]:
        winner = "competitor"
        notes.append(("opportunities",
                      f"Install analytics tracking (competitor uses {', '.join(theirs['analytics'])})"))

    return {
        "dimension": "technology",
        "yours": mine,
        "competitor": theirs,
        "sharedFrameworks": sorted(set(mine["frameworks"]) & set(theirs["frameworks"])),
        "winner": winner,
        "notes": notes,
    }
