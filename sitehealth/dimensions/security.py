"""Security & crawlability comparison — one point per passed check."""

from ..normalizer import usable
from .common import decide


def _side(record: dict) -> dict | None:
    scan = usable(record.get("puppeteer"))
    if not scan:
        return None
    security = scan.get("security") or {}
    return {
        "isHTTPS": bool(security.get("isHTTPS")),
        "hasCDN": bool(security.get("cdn")),
        "cdnProvider": security.get("cdn") or None,
        "hasMixedContent": bool(security.get("mixedContent")),
        "hasRobotsTxt": bool((scan.get("robotsTxt") or {}).get("exists")),
        "hasSitemap": bool((scan.get("sitemap") or {}).get("exists")),
        "sitemapUrls": (scan.get("sitemap") or {}).get("urlCount") or 0,
    }


def points(side: dict) -> int:
    return sum([
        side["isHTTPS"],
        side["hasCDN"],
        not side["hasMixedContent"],
        side["hasRobotsTxt"],
        side["hasSitemap"],
    ])


def compare(yours: dict, competitor: dict) -> dict | None:
    mine, theirs = _side(yours), _side(competitor)
    if mine is None or theirs is None:
        return None

    difference = points(mine) - points(theirs)
    notes = []

    if not mine["isHTTPS"]:
        notes.append(("weaknesses", "Not using HTTPS"))
        notes.append(("recommendations", "Implement SSL certificate for security"))
    if not mine["hasCDN"] and theirs["hasCDN"]:
        notes.append(("opportunities", "Implement CDN for better performance"))
    if mine["hasMixedContent"]:
        notes.append(("weaknesses", "Page loads insecure (mixed) content over HTTP"))

    return {
        "dimension": "security",
        "yours": mine,
        "competitor": theirs,
        "points": {"yours": points(mine), "competitor": points(theirs)},
        "difference": difference,
        "winner": decide(difference),
        "notes": notes,
    }
