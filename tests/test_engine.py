import asyncio

from sitehealth.engine import Collaborators, analyze_site, run_comparison, run_health_check
from sitehealth.fetcher import FetchError


SCAN = {
    "puppeteer": {
        "seo": {"title": "Fresh scan title", "headings": {"h1Count": 1}},
        "content": {"wordCount": 640},
        "security": {"isHTTPS": True},
    },
    "technicalSEO": {
        "ssl": {"hasSSL": True, "score": 100},
        "metaTags": {"hasTitle": True, "title": "Fresh scan title", "score": 70},
    },
}

PAGESPEED = {"mobile": {"labData": {"lcp": 2000, "performanceScore": 90}}}


class FakeFetchers:
    def __init__(self, scan=SCAN, pagespeed=PAGESPEED):
        self.calls = []
        self._scan = scan
        self._pagespeed = pagespeed

    async def scan(self, domain):
        self.calls.append(("scan", domain))
        if isinstance(self._scan, Exception):
            raise self._scan
        return self._scan

    async def pagespeed(self, domain):
        self.calls.append(("pagespeed", domain))
        if isinstance(self._pagespeed, Exception):
            raise self._pagespeed
        return self._pagespeed

    def collaborators(self):
        return Collaborators(scan=self.scan, pagespeed=self.pagespeed)


def test_missing_essentials_are_fetched_once():
    fakes = FakeFetchers()

    record = asyncio.run(analyze_site("shop.example", {}, collaborators=fakes.collaborators()))

    assert sorted(fakes.calls) == [("pagespeed", "shop.example"), ("scan", "shop.example")]
    assert record["fetchFresh"] == []
    assert record["seo"]["title"] == "Fresh scan title"
    assert record["technicalSEO"]["ssl"]["score"] == 100
    assert record["pagespeed"]["mobile"]["labData"]["performanceScore"] == 90


def test_failed_fetch_becomes_error_marker():
    fakes = FakeFetchers(pagespeed=FetchError("PageSpeed API rate limit reached"))

    record = asyncio.run(analyze_site("shop.example", {}, collaborators=fakes.collaborators()))

    assert len(fakes.calls) == 2
    assert record["pagespeed"] == {"success": False, "error": "PageSpeed API rate limit reached"}
    assert record["errors"]["pagespeed"] == "PageSpeed API rate limit reached"
    assert record["puppeteer"] is not None
    assert record["fetchFresh"] == []


def test_cached_sources_skip_fetching(full_sources):
    fakes = FakeFetchers()

    asyncio.run(analyze_site("shop.example", full_sources, collaborators=fakes.collaborators()))

    assert fakes.calls == []


def test_fetch_fresh_disabled():
    fakes = FakeFetchers()

    record = asyncio.run(analyze_site(
        "shop.example", {}, fetch_fresh=False, collaborators=fakes.collaborators(),
    ))

    assert fakes.calls == []
    assert record["fetchFresh"] == ["puppeteer", "pagespeed"]


def test_cached_technical_checks_are_kept():
    fakes = FakeFetchers()
    sources = {"technicalSEO": {"ssl": {"hasSSL": False, "score": 0}}}

    record = asyncio.run(analyze_site("shop.example", sources, collaborators=fakes.collaborators()))

    assert record["technicalSEO"]["ssl"]["score"] == 0


def test_health_check(full_sources):
    result = asyncio.run(run_health_check("www.shop.example", full_sources, fetch_fresh=False))

    assert result["domain"] == "shop.example"
    assert result["score"]["overall"] is not None
    assert len(result["recommendations"]) <= 5
    assert result["timestamp"].endswith("Z")
    assert result["analysisDuration"] >= 0


def test_comparison(full_sources):
    competitor = {"backlinks": {"totalBacklinks": 5000}, "lighthouse": {"categoryScores": {"performance": 95}}}

    result = asyncio.run(run_comparison(
        "shop.example", "rival.example", full_sources, competitor, fetch_fresh=False,
    ))

    assert result["success"] is True
    assert result["yourSite"]["domain"] == "shop.example"
    assert result["competitorSite"]["domain"] == "rival.example"
    assert result["comparison"]["overallWinner"] == "competitor"
    titles = [item["title"] for item in result["recommendations"]]
    assert "Close the speed gap with your competitor" in titles
    assert "Grow your backlink profile" in titles


def test_comparison_without_any_data():
    result = asyncio.run(run_comparison("a.example", "b.example", {}, {}, fetch_fresh=False))

    assert result["success"] is False
    assert result["error"] == "No data available for either site"


def test_all_rejected_sources_trigger_fresh_fetch():
    fakes = FakeFetchers()
    sources = {
        "puppeteer": RuntimeError("browser closed"),
        "pagespeed": {"status": "rejected", "reason": "quota exceeded"},
    }

    record = asyncio.run(analyze_site("shop.example", sources, collaborators=fakes.collaborators()))

    assert sorted(fakes.calls) == [("pagespeed", "shop.example"), ("scan", "shop.example")]
    assert record["hasData"] is True
    assert record["fetchFresh"] == []
    assert record["pagespeed"]["mobile"]["labData"]["performanceScore"] == 90
