"""
Source normalizer — reconciles provider payloads into one canonical record.

Each provider (Lighthouse, PageSpeed, technical SEO checks, on-page scan,
analytics, Search Console, traffic, content updates, backlinks, Instagram,
Facebook) may arrive as a dict, None, an Exception from an all-settled
gather, or a {"status": ..., "value"/"reason": ...} settled wrapper.
Whatever arrives, the output has the same shape; unusable sources are None
or a {"success": False, "error": ...} marker.
"""

import copy
import enum
import logging
import re

from .vitals import clamp, content_velocity, finite, round_half_up

logger = logging.getLogger(__name__)


PROVIDERS = (
    "lighthouse", "pagespeed", "technicalSEO", "puppeteer", "analytics",
    "searchConsole", "traffic", "contentUpdates", "backlinks",
    "instagram", "facebook",
)

# Sources worth a one-time fresh fetch when no cache supplied them
ESSENTIAL_SOURCES = ("puppeteer", "pagespeed")

LIGHTHOUSE_CATEGORIES = {
    "performance": "performance",
    "accessibility": "accessibility",
    "bestPractices": "best-practices",
    "seo": "seo",
}

VITAL_KEYS = {
    "lcp": ("lcp", "largestContentfulPaint", "largest-contentful-paint", "LCP"),
    "fid": ("fid", "firstInputDelay", "max-potential-fid", "inp", "FID", "INP"),
    "cls": ("cls", "cumulativeLayoutShift", "cumulative-layout-shift", "CLS"),
    "fcp": ("fcp", "firstContentfulPaint", "first-contentful-paint"),
    "speedIndex": ("speedIndex", "speed-index", "si"),
    "tbt": ("tbt", "totalBlockingTime", "total-blocking-time"),
}

TECHNICAL_CHECKS = ("robotsTxt", "sitemap", "ssl", "metaTags", "structuredData")

TRAFFIC_SOURCES = {
    "google_analytics": "google_analytics",
    "search_console": "search_console",
    "similarweb": "similarweb",
    "similarweb_estimate": "similarweb",
}

DEFAULT_HEADINGS = {"h1Count": 0, "h2Count": 0, "h3Count": 0}


class LighthouseShape(str, enum.Enum):
    CATEGORY_SCORES = "categoryScores"   # 0-100 per category
    CATEGORIES = "categories"            # raw lhr: categories.*.score 0-1
    FLAT = "flat"                        # legacy {performance: 90, metrics: {...}}
    UNKNOWN = "unknown"


class MetaShape(str, enum.Enum):
    NESTED = "nested"    # {metaTags: {title: {exists, content}, ...}}
    FLAT = "flat"        # {title, metaDescription}
    CHECKS = "checks"    # technical checks {metaTags: {hasTitle, title, ...}}
    NONE = "none"


# --- settled results -----------------------------------------------------

def failure(message: str) -> dict:
    return {"success": False, "error": message}


def is_failure(payload) -> bool:
    if not isinstance(payload, dict):
        return False
    if payload.get("success") is False and "error" in payload:
        return True
    return payload.get("dataAvailable") is False and "error" in payload


def usable(payload) -> dict | None:
    """The payload if it carries data, else None."""
    if not isinstance(payload, dict) or not payload or is_failure(payload):
        return None
    return payload


def _settle(payload) -> tuple:
    """Unwrap one all-settled result into (value, error)."""
    if isinstance(payload, BaseException):
        return None, str(payload) or payload.__class__.__name__
    if (
        isinstance(payload, dict)
        and payload.get("status") in ("fulfilled", "rejected")
        and set(payload) <= {"status", "value", "reason"}
    ):
        if payload["status"] == "rejected":
            reason = payload.get("reason")
            return None, str(reason) if reason else "Request failed"
        return _settle(payload.get("value"))
    if is_failure(payload):
        return None, str(payload.get("error") or "Source unavailable")
    return payload, None


def clean_domain(domain: str | None) -> str:
    if not isinstance(domain, str) or not domain:
        return ""
    domain = re.sub(r"^https?://", "", domain.strip(), flags=re.IGNORECASE)
    domain = re.sub(r"^www\.", "", domain, flags=re.IGNORECASE)
    return domain.rstrip("/").split("/")[0].lower()


# --- score scale helpers -------------------------------------------------

def to_display(fraction):
    """0-1 score -> 0-100 display value."""
    fraction = finite(fraction)
    if fraction is None:
        return None
    return round_half_up(clamp(fraction * 100))


def to_fraction(display):
    """0-100 display value -> 0-1 score."""
    display = finite(display)
    return None if display is None else display / 100


def _display(value):
    """Already 0-100: clamped, precision kept."""
    value = finite(value)
    return None if value is None else clamp(value)


def _first(mapping: dict, keys):
    for key in keys:
        if key in mapping and mapping[key] is not None:
            return mapping[key]
    return None


def _metric_value(metric):
    if isinstance(metric, dict):
        metric = _first(metric, ("numericValue", "value", "percentile"))
    return finite(metric)


def _count(value) -> int:
    if isinstance(value, (list, tuple)):
        return len(value)
    value = finite(value)
    return int(value) if value is not None else 0


def _branch(payload: dict, key: str) -> dict:
    """payload[key] if it is a dict, else {} (logged when something else was there)."""
    value = payload.get(key)
    if isinstance(value, dict):
        return value
    if value:
        logger.warning("Ignoring malformed %s branch (%s)", key, type(value).__name__)
    return {}


def _text(value) -> str | None:
    return value if isinstance(value, str) and value else None


def _names(value) -> list:
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


# --- lighthouse ----------------------------------------------------------

def classify_lighthouse(payload: dict) -> LighthouseShape:
    if isinstance(payload.get("categoryScores"), dict):
        return LighthouseShape.CATEGORY_SCORES
    if isinstance(payload.get("categories"), dict):
        return LighthouseShape.CATEGORIES
    if any(key in payload for key in (*LIGHTHOUSE_CATEGORIES, "best-practices")):
        return LighthouseShape.FLAT
    return LighthouseShape.UNKNOWN


def _category_display(payload: dict, shape: LighthouseShape, key: str, raw_key: str):
    if shape is LighthouseShape.CATEGORY_SCORES:
        scores = payload["categoryScores"]
        return _display(_first(scores, (key, raw_key)))

    if shape is LighthouseShape.CATEGORIES:
        category = _first(payload["categories"], (key, raw_key))
        if isinstance(category, dict):
            display = to_display(category.get("score"))
            if display is None:
                display = _display(category.get("displayValue"))
            return display
        return to_display(category)

    return _display(_first(payload, (key, raw_key)))


def _lighthouse_vitals(payload: dict) -> dict:
    source = {}
    for key in ("audits", "metrics", "coreWebVitals"):
        if isinstance(payload.get(key), dict):
            source.update(payload[key])

    vitals = {}
    for name, keys in VITAL_KEYS.items():
        vitals[name] = _metric_value(_first(source, keys))
    return vitals


def _opportunities(value) -> list:
    if isinstance(value, dict):
        return [str(key) for key in value]
    if not isinstance(value, (list, tuple)):
        return []
    result = []
    for item in value:
        if isinstance(item, dict):
            item = item.get("title") or item.get("id")
        if item:
            result.append(str(item))
    return result


def normalize_lighthouse(payload: dict | None) -> dict | None:
    if not payload:
        return None

    shape = classify_lighthouse(payload)
    if shape is LighthouseShape.UNKNOWN:
        logger.warning("Unrecognised lighthouse payload (keys: %s)", sorted(payload)[:8])
        return None

    display = {
        key: _category_display(payload, shape, key, raw_key)
        for key, raw_key in LIGHTHOUSE_CATEGORIES.items()
    }
    if all(value is None for value in display.values()):
        logger.warning("Lighthouse payload carries no category scores")
        return None

    return {
        "shape": shape.value,
        "categoryScores": display,
        "categories": {
            key: {"score": to_fraction(value), "displayValue": value}
            for key, value in display.items()
        },
        "coreWebVitals": _lighthouse_vitals(payload),
        "opportunities": _opportunities(payload.get("opportunities")),
    }


# --- pagespeed -----------------------------------------------------------

def _percentile(metric):
    if not isinstance(metric, dict):
        return None
    return finite(metric.get("percentile"))


def _from_pagespeed_api(payload: dict) -> dict:
    """Raw PageSpeed Insights v5 response -> {mobile: {fieldData, labData}}."""
    experience = _branch(payload, "loadingExperience")
    metrics = _branch(experience, "metrics")
    field = None
    if metrics:
        field = {
            "lcp": _percentile(metrics.get("LARGEST_CONTENTFUL_PAINT_MS")),
            "fid": _percentile(
                metrics.get("FIRST_INPUT_DELAY_MS")
                or metrics.get("INTERACTION_TO_NEXT_PAINT")
            ),
            "cls": _percentile(metrics.get("CUMULATIVE_LAYOUT_SHIFT_SCORE")),
        }

    result = _branch(payload, "lighthouseResult")
    audits = _branch(result, "audits")
    performance = _branch(_branch(result, "categories"), "performance")
    lab = {
        "lcp": _metric_value(audits.get("largest-contentful-paint")),
        "fid": _metric_value(audits.get("max-potential-fid")),
        "cls": _metric_value(audits.get("cumulative-layout-shift")),
        "performanceScore": to_display(performance.get("score")),
    }
    return {
        "mobile": {"fieldData": field, "labData": lab},
        "overall_category": experience.get("overall_category"),
    }


def _vitals(data, field: bool = False) -> dict | None:
    if not isinstance(data, dict):
        return None
    cls = _metric_value(_first(data, VITAL_KEYS["cls"]))
    if field and cls is not None:
        # CrUX reports CLS percentiles multiplied by 100
        cls = cls / 100
    vitals = {
        "lcp": _metric_value(_first(data, VITAL_KEYS["lcp"])),
        "fid": _metric_value(_first(data, VITAL_KEYS["fid"])),
        "cls": cls,
        "performanceScore": _display(data.get("performanceScore")),
    }
    if all(value is None for value in vitals.values()):
        return None
    return vitals


def normalize_pagespeed(payload: dict | None) -> dict | None:
    if not payload:
        return None
    if "loadingExperience" in payload or "lighthouseResult" in payload:
        payload = _from_pagespeed_api(payload)

    mobile = payload.get("mobile")
    if not isinstance(mobile, dict):
        if "fieldData" in payload or "labData" in payload:
            mobile = payload
        else:
            logger.warning("Unrecognised pagespeed payload (keys: %s)", sorted(payload)[:8])
            return None

    field = _vitals(mobile.get("fieldData"), field=True)
    lab = _vitals(mobile.get("labData"))
    if field is None and lab is None:
        score = _display(mobile.get("performanceScore"))
        if score is None:
            return None
        lab = {"lcp": None, "fid": None, "cls": None, "performanceScore": score}

    return {
        "mobile": {"fieldData": field, "labData": lab},
        "overallCategory": (
            payload.get("overall_category")
            or payload.get("overallCategory")
            or "UNKNOWN"
        ),
    }


# --- technical SEO -------------------------------------------------------

def normalize_technical_seo(payload: dict | None) -> dict | None:
    if not payload:
        return None

    checks = {}
    for name in TECHNICAL_CHECKS:
        check = payload.get(name)
        if isinstance(check, dict):
            entry = dict(check)
            entry["score"] = _display(check.get("score"))
            checks[name] = entry
        else:
            checks[name] = None

    if all(check is None for check in checks.values()):
        logger.warning("Technical SEO payload carries no recognised checks")
        return None

    headings = _headings(payload.get("headings"))
    if headings is not None:
        checks["headings"] = headings
    return checks


# --- on-page scan --------------------------------------------------------

def _headings(value) -> dict | None:
    """Heading counts from {h1Count..}, {h1: [...]} or {h1: 2}; None if empty."""
    if not isinstance(value, dict) or not value:
        return None
    headings = {}
    for level in (1, 2, 3):
        raw = value.get(f"h{level}Count", value.get(f"h{level}"))
        headings[f"h{level}Count"] = _count(raw)
    if not any(f"h{level}Count" in value or f"h{level}" in value for level in (1, 2, 3)):
        return None
    return headings


def _schema_list(value) -> list:
    if isinstance(value, list):
        return value
    if isinstance(value, dict) and value:
        return [value]
    return []


def normalize_scan(payload: dict | None) -> dict | None:
    if not payload:
        return None
    if not any(isinstance(payload.get(key), dict) for key in ("seo", "content", "technology", "security")):
        logger.warning("Unrecognised page scan payload (keys: %s)", sorted(payload)[:8])
        return None

    seo = dict(_branch(payload, "seo"))
    seo["headings"] = _headings(seo.get("headings"))
    seo["schemaMarkup"] = _schema_list(seo.get("schemaMarkup"))
    seo["openGraph"] = seo.get("openGraph") if isinstance(seo.get("openGraph"), dict) else {}
    seo["twitterCard"] = seo.get("twitterCard") if isinstance(seo.get("twitterCard"), dict) else {}

    content = _branch(payload, "content")
    images = content.get("images") if isinstance(content.get("images"), dict) else {}
    links = content.get("links") if isinstance(content.get("links"), dict) else {}
    technology = _branch(payload, "technology")
    security = _branch(payload, "security")
    robots = _branch(payload, "robotsTxt")
    sitemap = _branch(payload, "sitemap")

    return {
        "seo": seo,
        "content": {
            "wordCount": finite(content.get("wordCount")),
            "paragraphCount": finite(content.get("paragraphCount")),
            "images": {
                "total": _count(images.get("total")),
                "withAlt": _count(images.get("withAlt")),
                "altCoverage": finite(images.get("altCoverage")) or 0,
            },
            "links": {
                "total": _count(links.get("total")),
                "internal": _count(links.get("internal")),
                "external": _count(links.get("external")),
                "broken": _count(links.get("broken")),
            },
        },
        "technology": {
            "cms": technology.get("cms") or None,
            "frameworks": _names(technology.get("frameworks")),
            "analytics": _names(technology.get("analytics")),
            "thirdPartyScripts": _count(technology.get("thirdPartyScripts")),
        },
        "security": {
            "isHTTPS": bool(security.get("isHTTPS")),
            "cdn": security.get("cdn") or None,
            "mixedContent": bool(security.get("mixedContent")),
        },
        "robotsTxt": {"exists": bool(robots.get("exists"))},
        "sitemap": {
            "exists": bool(sitemap.get("exists")),
            "urlCount": _count(sitemap.get("urlCount")),
        },
    }


# --- meta tags & merged SEO view -----------------------------------------

def classify_meta(source) -> MetaShape:
    if not isinstance(source, dict):
        return MetaShape.NONE
    meta = source.get("metaTags")
    if isinstance(meta, dict):
        if isinstance(meta.get("title"), dict) or isinstance(meta.get("metaDescription"), dict):
            return MetaShape.NESTED
        if "hasTitle" in meta or "hasDescription" in meta:
            return MetaShape.CHECKS
    if "title" in source or "metaDescription" in source:
        return MetaShape.FLAT
    return MetaShape.NONE


def canonical_meta(source, shape: MetaShape) -> dict:
    """Meta tags in one shape: {hasTitle, hasDescription, title, description, ...Length}."""
    title = description = None
    has_title = has_description = False
    title_length = description_length = None

    if shape is MetaShape.NESTED:
        meta = source["metaTags"]
        title_tag = meta.get("title") if isinstance(meta.get("title"), dict) else {}
        desc_tag = meta.get("metaDescription") or meta.get("description")
        desc_tag = desc_tag if isinstance(desc_tag, dict) else {}
        title = _text(title_tag.get("content"))
        description = _text(desc_tag.get("content"))
        has_title = bool(title_tag.get("exists")) or bool(title)
        has_description = bool(desc_tag.get("exists")) or bool(description)
    elif shape is MetaShape.FLAT:
        title = _text(source.get("title"))
        description = _text(source.get("metaDescription")) or _text(source.get("description"))
        has_title = bool(title)
        has_description = bool(description)
    elif shape is MetaShape.CHECKS:
        meta = source["metaTags"]
        title = _text(meta.get("title"))
        description = _text(meta.get("description"))
        has_title = bool(meta.get("hasTitle")) or bool(title)
        has_description = bool(meta.get("hasDescription")) or bool(description)
        title_length = finite(meta.get("titleLength"))
        description_length = finite(meta.get("descriptionLength"))

    return {
        "hasTitle": has_title,
        "hasDescription": has_description,
        "title": title,
        "description": description,
        "titleLength": len(title) if title else int(title_length or 0),
        "descriptionLength": len(description) if description else int(description_length or 0),
    }


def merge_seo(scan: dict | None, technical: dict | None) -> dict | None:
    """SEO view preferring the full-page scan, then the technical checks."""
    if scan is None and technical is None:
        return None

    scan_seo = scan["seo"] if scan else {}
    scan_shape = classify_meta(scan_seo)
    tech_shape = classify_meta(technical)
    scan_meta = canonical_meta(scan_seo, scan_shape)
    tech_meta = canonical_meta(technical, tech_shape)

    meta = {}
    for key in ("title", "description"):
        meta[key] = scan_meta[key] or tech_meta[key]
    for key in ("titleLength", "descriptionLength"):
        meta[key] = scan_meta[key] or tech_meta[key]
    meta["hasTitle"] = scan_meta["hasTitle"] or tech_meta["hasTitle"]
    meta["hasDescription"] = scan_meta["hasDescription"] or tech_meta["hasDescription"]

    headings = (
        scan_seo.get("headings")
        or (technical or {}).get("headings")
        or dict(DEFAULT_HEADINGS)
    )

    tech_meta_tags = ((technical or {}).get("metaTags") or {})
    has_canonical = bool(scan_seo.get("canonical")) or bool(tech_meta_tags.get("hasCanonical"))

    og = scan_seo.get("openGraph") or {}
    twitter = scan_seo.get("twitterCard") or {}

    structured = len(scan_seo.get("schemaMarkup") or [])
    if not structured and technical:
        check = technical.get("structuredData") or {}
        structured = _count(check.get("count")) or (1 if check.get("hasStructuredData") else 0)

    return {
        **meta,
        "hasCanonical": has_canonical,
        "headings": dict(headings),
        "hasOpenGraph": bool(og.get("title") or og.get("description")),
        "hasTwitterCard": bool(twitter.get("card")),
        "structuredDataCount": structured,
        "metaShape": (scan_shape if scan_shape is not MetaShape.NONE else tech_shape).value,
    }


# --- analytics / search console / traffic --------------------------------

def normalize_traffic(payload: dict | None) -> dict | None:
    if not payload:
        return None

    metrics = payload.get("metrics")
    if not isinstance(metrics, dict):
        # daily series shape {source, data, summary: {avgDailyVisitors, ...}}
        summary = _branch(payload, "summary")
        daily = finite(summary.get("avgDailyVisitors"))
        if daily is None:
            logger.warning("Traffic payload has neither metrics nor summary")
            return None
        metrics = {"monthlyVisits": round_half_up(daily * 30)}

    source = payload.get("source")
    if source is not None and not (isinstance(source, str) and source in TRAFFIC_SOURCES):
        logger.warning("Unknown traffic source %r", source)
    sources = metrics.get("trafficSources")
    return {
        "success": bool(payload.get("success", True)),
        "source": TRAFFIC_SOURCES.get(source) if isinstance(source, str) else None,
        "metrics": {
            "monthlyVisits": finite(metrics.get("monthlyVisits")),
            "avgVisitDuration": finite(metrics.get("avgVisitDuration")),
            "pagesPerVisit": finite(metrics.get("pagesPerVisit")),
            "bounceRate": finite(metrics.get("bounceRate")),
            "trafficSources": dict(sources) if isinstance(sources, dict) else {},
        },
    }


def normalize_analytics(payload: dict | None, traffic: dict | None) -> dict | None:
    if payload:
        analytics = {
            "bounceRate": finite(payload.get("bounceRate")),
            "organicBounceRate": finite(payload.get("organicBounceRate")),
            "avgSessionDuration": finite(payload.get("avgSessionDuration")),
            "totalSessions": finite(payload.get("totalSessions")),
            "organicSessions": finite(payload.get("organicSessions")),
            "derivedFrom": "analytics",
        }
    elif traffic and traffic["success"]:
        metrics = traffic["metrics"]
        analytics = {
            "bounceRate": metrics["bounceRate"],
            "organicBounceRate": None,
            "avgSessionDuration": metrics["avgVisitDuration"],
            "totalSessions": metrics["monthlyVisits"],
            "organicSessions": None,
            "derivedFrom": "traffic",
        }
    else:
        return None

    if all(value is None for key, value in analytics.items() if key != "derivedFrom"):
        return None
    return analytics


def normalize_search_console(payload: dict | None) -> dict | None:
    if not payload:
        return None
    ctr = finite(payload.get("averageCTR"))
    if ctr is None and finite(payload.get("ctr")) is not None:
        ctr = finite(payload.get("ctr")) * 100
    console = {
        "totalClicks": finite(_first(payload, ("totalClicks", "clicks"))),
        "totalImpressions": finite(_first(payload, ("totalImpressions", "impressions"))),
        "averageCTR": ctr,
        "averagePosition": finite(_first(payload, ("averagePosition", "position"))),
    }
    if all(value is None for value in console.values()):
        return None
    return console


# --- content updates -----------------------------------------------------

def _recent_count(items) -> int:
    if isinstance(items, (list, tuple)):
        return sum(
            1 for item in items
            if not isinstance(item, dict) or (finite(item.get("daysAgo")) or 0) <= 30
        )
    return _count(items)


def normalize_content_updates(payload: dict | None) -> dict | None:
    if not payload:
        return None
    rss = _branch(payload, "rss")
    sitemap = _branch(payload, "sitemap")
    activity = _branch(payload, "contentActivity")
    if not (rss or sitemap or activity):
        logger.warning("Content updates payload has no rss, sitemap or activity")
        return None

    rss_recent = _recent_count(rss.get("recentPosts"))
    sitemap_recent = _count(sitemap.get("recentlyModified"))

    recent_activity = finite(activity.get("recentActivityCount"))
    if recent_activity is None:
        recent_activity = (rss_recent if rss.get("found") else 0) + (
            sitemap_recent if sitemap.get("found") else 0
        )
    posts_per_month = finite(activity.get("averagePostsPerMonth")) or 0

    return {
        "rss": {
            "found": bool(rss.get("found")),
            "recentPosts": rss_recent,
            "totalPosts": _count(rss.get("totalPosts", rss.get("recentPosts"))),
            "lastUpdated": rss.get("lastUpdated"),
        },
        "sitemap": {
            "found": bool(sitemap.get("found")),
            "recentlyModified": sitemap_recent,
            "lastModified": sitemap.get("lastModified"),
        },
        "contentActivity": {
            "updateFrequency": activity.get("updateFrequency") or "unknown",
            "lastContentDate": activity.get("lastContentDate"),
            "averagePostsPerMonth": posts_per_month,
            "isActive": bool(activity.get("isActive")),
            "contentVelocity": activity.get("contentVelocity") or content_velocity(posts_per_month),
            "recentActivityCount": recent_activity,
        },
    }


# --- backlinks & social --------------------------------------------------

def normalize_backlinks(payload: dict | None) -> dict | None:
    if not payload:
        return None
    total = finite(_first(payload, ("totalBacklinks", "total", "backlinks")))
    if total is None:
        return None
    return {
        "totalBacklinks": total,
        "referringDomains": finite(payload.get("referringDomains")),
    }


def normalize_social(payload: dict | None) -> dict | None:
    if not payload:
        return None

    profile = payload.get("profile")
    if not isinstance(profile, dict):
        # Facebook comprehensive metrics shape
        profile = _branch(payload, "reputationBenchmark")
    engagement = _branch(payload, "engagement")
    summary = _branch(engagement, "summary")
    pattern = _branch(engagement, "postingPattern")

    rate = finite(profile.get("avgEngagementRate"))
    if rate is None:
        rate = finite(_branch(payload, "engagementScore").get("engagementRate"))

    social = {
        "profile": {
            "followers": finite(profile.get("followers")),
            "verified": bool(profile.get("verified")),
            "avgEngagementRate": rate,
            "qualityScore": finite(profile.get("qualityScore", profile.get("score"))),
        },
        "engagement": {
            "summary": {
                "avgLikesPerPost": finite(summary.get("avgLikesPerPost")),
                "avgCommentsPerPost": finite(summary.get("avgCommentsPerPost")),
                "avgInteractionsPerPost": finite(summary.get("avgInteractionsPerPost")),
                "consistency": summary.get("consistency"),
            },
            "postingPattern": {
                "bestDays": _names(pattern.get("bestDays")),
                "bestHours": _names(pattern.get("bestHours")),
            },
        },
    }
    if social["profile"]["followers"] is None and rate is None:
        return None
    return social


# --- entry point ---------------------------------------------------------

def normalize(raw_sources: dict | None, domain: str | None = None) -> dict:
    """Build the canonical record for one domain from raw provider payloads."""
    raw_sources = raw_sources or {}
    errors = {}
    payloads = {}

    for name in PROVIDERS:
        if name not in raw_sources:
            continue
        value, error = _settle(raw_sources[name])
        if error:
            errors[name] = error
            logger.info("Source %s unavailable: %s", name, error)
        payloads[name] = copy.deepcopy(usable(value))

    # Older caches nest lighthouse and backlinks inside the Search Console entry
    legacy = payloads.get("searchConsole") or {}
    lighthouse_payload = payloads.get("lighthouse") or usable(legacy.get("lighthouse"))
    backlinks_payload = payloads.get("backlinks") or usable(legacy.get("backlinks"))

    scan = normalize_scan(payloads.get("puppeteer"))
    technical = normalize_technical_seo(payloads.get("technicalSEO"))
    traffic = normalize_traffic(payloads.get("traffic"))

    record = {
        "domain": clean_domain(domain or raw_sources.get("domain")),
        "lighthouse": normalize_lighthouse(lighthouse_payload),
        "pagespeed": normalize_pagespeed(payloads.get("pagespeed")),
        "technicalSEO": technical,
        "puppeteer": scan,
        "seo": merge_seo(scan, technical),
        "analytics": normalize_analytics(payloads.get("analytics"), traffic),
        "searchConsole": normalize_search_console(payloads.get("searchConsole")),
        "traffic": traffic,
        "contentUpdates": normalize_content_updates(payloads.get("contentUpdates")),
        "backlinks": normalize_backlinks(backlinks_payload),
        "instagram": normalize_social(payloads.get("instagram")),
        "facebook": normalize_social(payloads.get("facebook")),
    }

    for name, error in errors.items():
        if record.get(name) is None:
            record[name] = failure(error)

    record["hasData"] = any(usable(record[name]) for name in PROVIDERS)
    record["errors"] = errors
    if record["hasData"]:
        record["fetchFresh"] = [name for name in ESSENTIAL_SOURCES if record[name] is None]
    else:
        record["fetchFresh"] = list(ESSENTIAL_SOURCES)
    return record
