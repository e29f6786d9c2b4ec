"""
SEO comparison — rubric score over the merged meta/heading/social view.

Rubric (max 100):
  Meta tags (40): title 10, description 10, canonical 10,
                  title 30-60 chars 5, description 120-160 chars 5
  Headings (20):  exactly one H1 10, any H2 5, any H3 5
  Social (20):    OpenGraph 10, Twitter Card 10
  Structured data (20): any block 20
"""

from ..normalizer import DEFAULT_HEADINGS, usable
from ..vitals import finite
from .common import decide, fmt, tidy

THRESHOLD = 5


def seo_score(seo: dict) -> int:
    headings = seo.get("headings") or DEFAULT_HEADINGS
    score = 0

    if seo.get("hasTitle"):
        score += 10
    if seo.get("hasDescription"):
        score += 10
    if seo.get("hasCanonical"):
        score += 10
    if 30 <= (seo.get("titleLength") or 0) <= 60:
        score += 5
    if 120 <= (seo.get("descriptionLength") or 0) <= 160:
        score += 5

    if headings.get("h1Count") == 1:
        score += 10
    if (headings.get("h2Count") or 0) > 0:
        score += 5
    if (headings.get("h3Count") or 0) > 0:
        score += 5

    if seo.get("hasOpenGraph"):
        score += 10
    if seo.get("hasTwitterCard"):
        score += 10

    if (seo.get("structuredDataCount") or 0) > 0:
        score += 20

    return min(score, 100)


def _side(record: dict) -> dict | None:
    seo = usable(record.get("seo"))
    if not seo:
        return None

    lighthouse = usable(record.get("lighthouse"))
    lighthouse_seo = None
    if lighthouse:
        lighthouse_seo = finite((lighthouse.get("categoryScores") or {}).get("seo"))

    return {
        "metaTags": {
            "hasTitle": bool(seo.get("hasTitle")),
            "hasDescription": bool(seo.get("hasDescription")),
            "hasCanonical": bool(seo.get("hasCanonical")),
            "titleLength": seo.get("titleLength") or 0,
            "descriptionLength": seo.get("descriptionLength") or 0,
        },
        "headings": dict(seo.get("headings") or DEFAULT_HEADINGS),
        "socialMedia": {
            "hasOpenGraph": bool(seo.get("hasOpenGraph")),
            "hasTwitterCard": bool(seo.get("hasTwitterCard")),
        },
        "structuredData": seo.get("structuredDataCount") or 0,
        "lighthouseSeo": lighthouse_seo,
        "score": seo_score(seo),
    }


def compare(yours: dict, competitor: dict) -> dict | None:
    mine, theirs = _side(yours), _side(competitor)
    if mine is None or theirs is None:
        return None

    difference = mine["score"] - theirs["score"]
    notes = []

    if difference > THRESHOLD:
        notes.append(("strengths",
                      f"Stronger on-page SEO than the competitor ({fmt(difference)} points ahead)"))
    elif difference < -THRESHOLD:
        notes.append(("weaknesses",
                      f"On-page SEO trails the competitor by {fmt(-difference)} points"))
        notes.append(("recommendations",
                      "Improve meta tags, add structured data, and optimize heading structure"))
        if theirs["structuredData"] and not mine["structuredData"]:
            notes.append(("opportunities",
                          "Add structured data (JSON-LD) to compete for rich results"))

    return {
        "dimension": "seo",
        "yours": mine,
        "competitor": theirs,
        "scores": {"yours": mine["score"], "competitor": theirs["score"]},
        "difference": tidy(difference),
        "winner": decide(difference),
        "notes": notes,
    }
