"""
Recommendation ranker — turns score deficiencies and comparison gaps into
at most five prioritized findings.
"""

from .normalizer import usable
from .scorer import bounce_rate
from .vitals import finite


PRIORITY_ORDER = {"high": 3, "medium": 2, "low": 1}
MAX_RECOMMENDATIONS = 5

# Dimensions the competitor wins -> (priority, category, title, description)
GAP_RECOMMENDATIONS = {
    "performance": ("high", "performance", "Close the speed gap with your competitor",
                    "Your competitor's pages load faster. Prioritize image compression, "
                    "script deferral and server response time."),
    "seo": ("medium", "seo", "Match your competitor's on-page SEO",
            "Add missing meta tags, structured data and social tags the competitor already has."),
    "backlinks": ("medium", "authority", "Grow your backlink profile",
                  "Your competitor has more backlinks. Invest in outreach and linkable content."),
    "traffic": ("medium", "traffic", "Win back search traffic",
                "Your competitor gets more monthly visits. Target the queries and channels driving them."),
    "contentUpdates": ("low", "content", "Publish more often",
                       "Your competitor updates content more frequently. Set a regular publishing cadence."),
}


def _item(category, priority, title, description, impact=None) -> dict:
    return {
        "category": category,
        "priority": priority,
        "title": title,
        "description": description,
        "impact": impact or priority,
    }


def _below(value, limit) -> bool:
    value = finite(value)
    return value is not None and value < limit


def _above(value, limit) -> bool:
    value = finite(value)
    return value is not None and value > limit


def _score_recommendations(record: dict, breakdown: dict) -> list:
    items = []
    lighthouse = usable(record.get("lighthouse"))
    scores = lighthouse["categoryScores"] if lighthouse else {}
    pagespeed = usable(record.get("pagespeed")) or {}
    lab = (pagespeed.get("mobile") or {}).get("labData") or {}
    analytics = usable(record.get("analytics"))

    if _below(breakdown.get("technical"), 70):
        if _below(scores.get("performance"), 70):
            items.append(_item(
                "performance", "high", "Improve Core Web Vitals",
                "Focus on Largest Contentful Paint (LCP) and Cumulative Layout Shift (CLS)",
            ))
        if _above(lab.get("lcp"), 2500):
            items.append(_item(
                "performance", "high", "Optimize Largest Contentful Paint",
                "Reduce LCP to under 2.5 seconds by optimizing images and server response times",
            ))

    if _below(breakdown.get("userExperience"), 70) and analytics:
        if _above(bounce_rate(analytics), 60):
            items.append(_item(
                "user_experience", "medium", "Reduce bounce rate",
                "Improve page content relevance and loading speed to keep users engaged",
            ))
        if _below(analytics.get("avgSessionDuration"), 60):
            items.append(_item(
                "user_experience", "medium", "Increase session duration",
                "Add more engaging content and improve internal linking to keep users longer",
            ))

    if _below(breakdown.get("seoHealth"), 80):
        if _below(scores.get("seo"), 80):
            items.append(_item(
                "seo", "medium", "Fix SEO fundamentals",
                "Improve meta descriptions, title tags, and heading structure",
            ))
        if _below(scores.get("accessibility"), 80):
            items.append(_item(
                "accessibility", "medium", "Improve accessibility",
                "Add alt text to images and improve color contrast ratios",
            ))

    if _below(breakdown.get("searchVisibility"), 60):
        items.append(_item(
            "search_visibility", "medium", "Improve search visibility",
            "Rewrite titles and descriptions of high-impression pages to lift click-through rate and rankings",
        ))

    if _below(breakdown.get("technicalSEO"), 70):
        checks = usable(record.get("technicalSEO")) or {}
        if not (checks.get("ssl") or {}).get("hasSSL", True):
            items.append(_item(
                "technical_seo", "high", "Serve the site over HTTPS",
                "Install an SSL certificate and redirect all HTTP traffic to HTTPS",
            ))
        if not (checks.get("robotsTxt") or {}).get("exists", True):
            items.append(_item(
                "technical_seo", "medium", "Add a robots.txt file",
                "Publish robots.txt with crawl rules and a Sitemap: directive",
            ))
        if not (checks.get("sitemap") or {}).get("exists", True):
            items.append(_item(
                "technical_seo", "medium", "Publish an XML sitemap",
                "Generate sitemap.xml and submit it in Search Console",
            ))
        if _below((checks.get("metaTags") or {}).get("score"), 70):
            items.append(_item(
                "technical_seo", "medium", "Optimize title and meta description",
                "Keep titles at 30-60 characters and descriptions at 120-160 characters",
            ))

    return items


def _gap_recommendations(comparison: dict | None) -> list:
    items = []
    for result in (comparison or {}).get("dimensions", []):
        gap = GAP_RECOMMENDATIONS.get(result.get("dimension"))
        if gap and result.get("winner") == "competitor":
            priority, category, title, description = gap
            items.append(_item(category, priority, title, description))
    return items


def _setup_recommendations(record: dict, scores: dict) -> list:
    items = []
    if not usable(record.get("analytics")):
        items.append(_item(
            "setup", "low", "Connect Google Analytics",
            "Add GA4 tracking to get user behavior insights and improve score accuracy",
        ))
    if scores.get("mode") == "enhanced" and not usable(record.get("searchConsole")):
        items.append(_item(
            "setup", "low", "Connect Search Console",
            "Link Google Search Console to score click-through rate, rankings and impressions",
        ))
    if scores.get("overall") is None:
        items.append(_item(
            "setup", "low", "Connect more data sources",
            "No score could be computed. Connect analytics, Search Console or run a page audit",
        ))
    return items


def rank_recommendations(record: dict | None, scores: dict | None, comparison: dict | None = None) -> list:
    """Top five recommendations, highest priority first (stable on ties)."""
    record = record or {}
    scores = scores or {}
    breakdown = scores.get("breakdown") or {}

    candidates = (
        _score_recommendations(record, breakdown)
        + _gap_recommendations(comparison)
        + _setup_recommendations(record, scores)
    )
    candidates.sort(key=lambda item: PRIORITY_ORDER[item["priority"]], reverse=True)
    return candidates[:MAX_RECOMMENDATIONS]
