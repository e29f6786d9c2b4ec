"""Content depth comparison — scanned word count, gap threshold 300 words."""

from ..normalizer import usable
from .common import decide, fmt, tidy

THRESHOLD = 300


def _side(record: dict) -> dict | None:
    scan = usable(record.get("puppeteer"))
    if not scan:
        return None
    content = scan.get("content") or {}
    if content.get("wordCount") is None:
        return None
    images = content.get("images") or {}
    links = content.get("links") or {}
    return {
        "wordCount": content["wordCount"],
        "paragraphCount": content.get("paragraphCount") or 0,
        "imageCount": images.get("total", 0),
        "imageAltCoverage": images.get("altCoverage", 0),
        "totalLinks": links.get("total", 0),
        "internalLinks": links.get("internal", 0),
        "externalLinks": links.get("external", 0),
        "brokenLinks": links.get("broken", 0),
    }


def compare(yours: dict, competitor: dict) -> dict | None:
    mine, theirs = _side(yours), _side(competitor)
    if mine is None or theirs is None:
        return None

    difference = mine["wordCount"] - theirs["wordCount"]
    notes = []

    if difference > THRESHOLD:
        notes.append(("strengths",
                      f"More comprehensive content ({fmt(difference)} more words on the homepage)"))
    elif difference < -THRESHOLD:
        notes.append(("opportunities",
                      f"Create more in-depth content to match competitor ({fmt(-difference)} words behind)"))

    if mine["brokenLinks"] and not theirs["brokenLinks"]:
        notes.append(("weaknesses", f"{mine['brokenLinks']} broken links found on your page"))

    return {
        "dimension": "content",
        "yours": mine,
        "competitor": theirs,
        "difference": tidy(difference),
        "winner": decide(difference),
        "notes": notes,
    }
