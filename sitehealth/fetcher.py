"""
Fetch fresh provider data when no cache has it: the page itself plus
robots.txt / sitemap.xml (for the on-page scan and technical checks) and the
PageSpeed Insights API.

Page scans share one scan session; only one runs at a time and each waits
SCAN_SETTLE_DELAY before releasing it.
"""

import asyncio
import logging
from urllib.parse import urlparse

import httpx

from . import config
from .parser import build_scan, build_technical_checks, parse_html

logger = logging.getLogger(__name__)

HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; SiteHealthBot/1.0)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
}

PAGESPEED_ENDPOINT = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"

SITEMAP_PATHS = ("/sitemap.xml", "/sitemap_index.xml", "/sitemaps/sitemap.xml")

_scan_session = asyncio.Lock()


class FetchError(Exception):
    pass


def site_url(domain: str) -> str:
    if not urlparse(domain).scheme:
        return f"https://{domain}"
    return domain


async def fetch_page(url: str, client: httpx.AsyncClient | None = None) -> dict:
    """Fetch the main page + robots.txt and the first sitemap found, in parallel."""
    url = site_url(url)
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise FetchError(f"Invalid URL scheme: {parsed.scheme}")

    origin = f"{parsed.scheme}://{parsed.netloc}"
    result = {
        "url": url,
        "final_url": url,
        "status_code": None,
        "html": None,
        "headers": {},
        "robots_txt": None,
        "sitemap_xml": None,
        "sitemap_url": None,
    }

    own_client = client is None
    if own_client:
        client = httpx.AsyncClient(headers=HEADERS, follow_redirects=True, timeout=config.FETCH_TIMEOUT)

    try:
        responses = await asyncio.gather(
            client.get(url),
            client.get(f"{origin}/robots.txt"),
            *(client.get(f"{origin}{path}") for path in SITEMAP_PATHS),
            return_exceptions=True,
        )
    finally:
        if own_client:
            await client.aclose()

    main_resp = responses[0]
    if isinstance(main_resp, Exception):
        raise FetchError(f"Could not fetch {url}: {main_resp}") from main_resp
    if main_resp.status_code >= 400:
        raise FetchError(f"{url} returned HTTP {main_resp.status_code}")

    result["final_url"] = str(main_resp.url)
    result["status_code"] = main_resp.status_code
    result["html"] = main_resp.text
    result["headers"] = dict(main_resp.headers)

    robots = responses[1]
    if not isinstance(robots, Exception) and robots.status_code == 200:
        result["robots_txt"] = robots.text

    for path, resp in zip(SITEMAP_PATHS, responses[2:]):
        if isinstance(resp, Exception) or resp.status_code != 200:
            continue
        if "<?xml" in resp.text and "sitemap" in resp.text.lower():
            result["sitemap_xml"] = resp.text
            result["sitemap_url"] = f"{origin}{path}"
            break

    return result


async def scan_site(domain: str, client: httpx.AsyncClient | None = None) -> dict:
    """On-page scan + technical checks, serialized through the scan session."""
    async with _scan_session:
        logger.info("Scanning %s", domain)
        try:
            fetch_result = await fetch_page(domain, client)
        finally:
            await asyncio.sleep(config.SCAN_SETTLE_DELAY)

    parsed = parse_html(fetch_result["html"] or "", base_url=fetch_result["final_url"])
    return {
        "puppeteer": build_scan(parsed, fetch_result),
        "technicalSEO": build_technical_checks(parsed, fetch_result),
    }


async def fetch_pagespeed(domain: str, client: httpx.AsyncClient | None = None) -> dict:
    """Raw PageSpeed Insights response (mobile strategy)."""
    if not config.GOOGLE_API_KEY:
        raise FetchError("Google API key not configured")

    params = {
        "url": site_url(domain),
        "key": config.GOOGLE_API_KEY,
        "strategy": "mobile",
        "category": "performance",
    }
    logger.info("Fetching PageSpeed data for %s", domain)

    if client is None:
        async with httpx.AsyncClient(timeout=config.PAGESPEED_TIMEOUT) as own_client:
            response = await own_client.get(PAGESPEED_ENDPOINT, params=params)
    else:
        response = await client.get(PAGESPEED_ENDPOINT, params=params)

    if response.status_code == 429:
        raise FetchError("PageSpeed API rate limit reached")
    response.raise_for_status()
    return response.json()
