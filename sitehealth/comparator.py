"""
Site comparator — builds the "your site vs competitor" report.

Each dimension module returns a result with a winner ('yours',
'competitor' or 'tie'), or None when it cannot be compared. Summary notes
from the dimensions are gathered into strengths / weaknesses /
opportunities / recommendations.

Overall verdict: wins are counted over performance, seo, backlinks,
traffic, contentUpdates and instagram engagement; losses over the same
set without instagram. The asymmetry matches the existing dashboard
numbers and is kept on purpose.
"""

import logging
from functools import partial

from .dimensions import (
    backlinks,
    content,
    content_updates,
    performance,
    security,
    seo,
    social,
    technology,
    traffic,
)

logger = logging.getLogger(__name__)


DIMENSIONS = [
    ("performance", performance.compare),
    ("seo", seo.compare),
    ("backlinks", backlinks.compare),
    ("content", content.compare),
    ("traffic", traffic.compare),
    ("contentUpdates", content_updates.compare),
    ("instagram", partial(social.compare, platform="instagram")),
    ("facebook", partial(social.compare, platform="facebook")),
    ("technology", technology.compare),
    ("security", security.compare),
]

WIN_DIMENSIONS = ("performance", "seo", "backlinks", "traffic", "contentUpdates", "instagram.engagement")
LOSS_DIMENSIONS = ("performance", "seo", "backlinks", "traffic", "contentUpdates")

SUMMARY_BUCKETS = ("strengths", "weaknesses", "opportunities", "recommendations")


def _empty_summary() -> dict:
    return {bucket: [] for bucket in SUMMARY_BUCKETS}


def _has_data(record) -> bool:
    return isinstance(record, dict) and bool(record) and record.get("hasData", True)


def _winner_at(results: dict, path: str):
    name, _, sub = path.partition(".")
    result = results.get(name)
    if result and sub:
        result = result.get(sub)
    return result.get("winner") if isinstance(result, dict) else None


def overall_verdict(results: dict) -> dict:
    """Tally wins and losses over the fixed dimension sets."""
    wins = sum(1 for path in WIN_DIMENSIONS if _winner_at(results, path) == "yours")
    losses = sum(1 for path in LOSS_DIMENSIONS if _winner_at(results, path) == "competitor")

    if wins > losses:
        winner = "yours"
    elif losses > wins:
        winner = "competitor"
    else:
        winner = "tie"
    return {"wins": wins, "losses": losses, "overallWinner": winner}


def compare_sites(yours: dict | None, competitor: dict | None) -> dict:
    """Compare two normalized records dimension by dimension."""
    if not _has_data(yours) and not _has_data(competitor):
        return {
            "error": "No data available for either site",
            "dimensions": [],
            "summary": _empty_summary(),
            "wins": 0,
            "losses": 0,
            "overallWinner": None,
        }

    yours = yours or {}
    competitor = competitor or {}
    summary = _empty_summary()
    dimensions = []

    for name, compare in DIMENSIONS:
        result = compare(yours, competitor)
        if result is None:
            logger.debug("Dimension %s skipped: data missing on one side", name)
            continue
        for bucket, text in result.pop("notes", []):
            summary[bucket].append(text)
        dimensions.append(result)

    by_name = {result["dimension"]: result for result in dimensions}
    return {
        "dimensions": dimensions,
        "summary": summary,
        **overall_verdict(by_name),
    }
