"""
Analysis engine — orchestrates normalize, fetch-fresh fallback, score, compare, rank.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable

from . import fetcher
from .comparator import compare_sites
from .normalizer import normalize, usable
from .recommendations import rank_recommendations
from .scorer import score_health

logger = logging.getLogger(__name__)


@dataclass
class Collaborators:
    """Fetchers used when a required source is missing from every cache."""

    scan: Callable[[str], Awaitable[dict]] = fetcher.scan_site
    pagespeed: Callable[[str], Awaitable[dict]] = fetcher.fetch_pagespeed


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


async def analyze_site(
    domain: str,
    sources: dict | None = None,
    fetch_fresh: bool = True,
    collaborators: Collaborators | None = None,
) -> dict:
    """
    Normalize cached sources for one domain.

    When essential sources are missing from every cache, fetch them once
    (all-settled: a failed fetch becomes an error marker) and normalize again.
    """
    sources = dict(sources or {})
    record = normalize(sources, domain)
    missing = record["fetchFresh"]
    if not fetch_fresh or not missing:
        return record

    collaborators = collaborators or Collaborators()
    jobs = {}
    if "puppeteer" in missing:
        jobs["scan"] = collaborators.scan(domain)
    if "pagespeed" in missing:
        jobs["pagespeed"] = collaborators.pagespeed(domain)

    logger.info("Fetching fresh %s for %s", ", ".join(jobs), domain)
    results = dict(zip(jobs, await asyncio.gather(*jobs.values(), return_exceptions=True)))

    scan = results.get("scan")
    if isinstance(scan, BaseException):
        logger.warning("Page scan failed for %s: %s", domain, scan)
        sources["puppeteer"] = scan
    elif scan is not None:
        sources["puppeteer"] = scan.get("puppeteer")
        if not usable(record.get("technicalSEO")):
            sources["technicalSEO"] = scan.get("technicalSEO")

    if "pagespeed" in results:
        if isinstance(results["pagespeed"], BaseException):
            logger.warning("PageSpeed fetch failed for %s: %s", domain, results["pagespeed"])
        sources["pagespeed"] = results["pagespeed"]

    return normalize(sources, domain)


async def run_health_check(
    domain: str,
    sources: dict | None = None,
    mode: str = "enhanced",
    fetch_fresh: bool = True,
    collaborators: Collaborators | None = None,
) -> dict:
    """Score one site and attach its recommendations."""
    start = time.time()
    record = await analyze_site(domain, sources, fetch_fresh, collaborators)
    scores = score_health(record, mode)

    return {
        "domain": record["domain"] or domain,
        "score": scores,
        "recommendations": rank_recommendations(record, scores),
        "record": record,
        "timestamp": _timestamp(),
        "analysisDuration": int((time.time() - start) * 1000),
    }


async def run_comparison(
    your_domain: str,
    competitor_domain: str,
    your_sources: dict | None = None,
    competitor_sources: dict | None = None,
    fetch_fresh: bool = True,
    collaborators: Collaborators | None = None,
) -> dict:
    """Compare your site against a competitor."""
    logger.info("Comparing %s against %s", your_domain, competitor_domain)

    # One site after the other; the scans share a session anyway
    yours = await analyze_site(your_domain, your_sources, fetch_fresh, collaborators)
    competitor = await analyze_site(competitor_domain, competitor_sources, fetch_fresh, collaborators)

    comparison = compare_sites(yours, competitor)
    if comparison.get("error"):
        return {
            "success": False,
            "error": comparison["error"],
            "timestamp": _timestamp(),
        }

    your_scores = score_health(yours)
    competitor_scores = score_health(competitor)

    return {
        "success": True,
        "timestamp": _timestamp(),
        "yourSite": {"domain": yours["domain"] or your_domain, "score": your_scores, "record": yours},
        "competitorSite": {
            "domain": competitor["domain"] or competitor_domain,
            "score": competitor_scores,
            "record": competitor,
        },
        "comparison": comparison,
        "recommendations": rank_recommendations(yours, your_scores, comparison),
    }
