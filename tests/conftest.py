import copy

import pytest

from sitehealth.normalizer import normalize


FULL_SOURCES = {
    "lighthouse": {
        "categories": {
            "performance": {"score": 0.82},
            "accessibility": {"score": 0.91},
            "best-practices": {"score": 0.95},
            "seo": {"score": 0.88},
        },
        "audits": {
            "largest-contentful-paint": {"numericValue": 2300},
            "cumulative-layout-shift": {"numericValue": 0.04},
        },
    },
    "pagespeed": {
        "mobile": {
            "fieldData": {"lcp": 2200, "fid": 40, "cls": 5},
            "labData": {"lcp": 2600, "fid": 120, "cls": 0.08, "performanceScore": 78},
        },
    },
    "technicalSEO": {
        "robotsTxt": {"exists": True, "score": 100, "hasSitemap": True},
        "sitemap": {"exists": True, "score": 100, "url": "https://shop.example/sitemap.xml"},
        "ssl": {"hasSSL": True, "score": 100},
        "metaTags": {
            "score": 70,
            "hasTitle": True,
            "hasDescription": True,
            "titleLength": 42,
            "descriptionLength": 140,
            "title": "Handmade ceramics and tableware | Shop Example",
            "description": "Hand-thrown mugs, plates and bowls made in small batches.",
        },
        "structuredData": {"hasStructuredData": True, "score": 50},
    },
    "puppeteer": {
        "seo": {
            "title": "Handmade ceramics and tableware | Shop Example",
            "metaDescription": "Hand-thrown mugs, plates and bowls made in small batches.",
            "canonical": "https://shop.example/",
            "headings": {"h1Count": 1, "h2Count": 4, "h3Count": 2},
            "schemaMarkup": [{"@type": "Organization"}],
            "openGraph": {"title": "Shop Example"},
            "twitterCard": {"card": "summary_large_image"},
        },
        "content": {
            "wordCount": 1200,
            "paragraphCount": 18,
            "images": {"total": 12, "withAlt": 9, "altCoverage": 75},
            "links": {"total": 60, "internal": 48, "external": 12, "broken": 0},
        },
        "technology": {"cms": "Shopify", "frameworks": ["jQuery"], "analytics": ["Google Analytics"]},
        "security": {"isHTTPS": True, "cdn": "Cloudflare", "mixedContent": False},
        "robotsTxt": {"exists": True},
        "sitemap": {"exists": True, "urlCount": 140},
    },
    "analytics": {
        "bounceRate": 45.5,
        "avgSessionDuration": 195,
        "totalSessions": 1250,
        "organicSessions": 850,
        "organicBounceRate": 38.2,
    },
    "searchConsole": {
        "totalClicks": 420,
        "totalImpressions": 15000,
        "averageCTR": 2.8,
        "averagePosition": 14.2,
    },
    "traffic": {
        "success": True,
        "source": "google_analytics",
        "metrics": {"monthlyVisits": 5400, "avgVisitDuration": 195, "pagesPerVisit": 3.1, "bounceRate": 45.5},
    },
    "contentUpdates": {
        "rss": {"found": True, "recentPosts": 4, "totalPosts": 20, "lastUpdated": "2026-10-01T00:00:00Z"},
        "sitemap": {"found": True, "recentlyModified": 6, "lastModified": "2026-10-10T00:00:00Z"},
        "contentActivity": {
            "updateFrequency": "weekly",
            "lastContentDate": "2026-10-10T00:00:00Z",
            "averagePostsPerMonth": 6,
            "isActive": True,
            "recentActivityCount": 10,
        },
    },
    "backlinks": {"totalBacklinks": 830, "referringDomains": 120},
    "instagram": {
        "profile": {"followers": 5400, "verified": False, "avgEngagementRate": 3.4, "qualityScore": 72},
        "engagement": {
            "summary": {"avgLikesPerPost": 150, "avgCommentsPerPost": 12, "avgInteractionsPerPost": 162},
            "postingPattern": {"bestDays": ["Tuesday", "Thursday"], "bestHours": [18, 19]},
        },
    },
}


@pytest.fixture
def full_sources():
    return copy.deepcopy(FULL_SOURCES)


@pytest.fixture
def site():
    """Normalize raw payloads into a record for a throwaway domain."""
    def build(domain="example.com", **sources):
        return normalize(sources, domain)
    return build
