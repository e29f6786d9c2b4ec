"""
Parse a fetched page into the on-page scan and technical SEO check payloads
consumed by the normalizer.
"""

import json
import re
from typing import Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup


CMS_SIGNATURES = {
    "WordPress": ("wp-content", "wp-includes"),
    "Shopify": ("cdn.shopify.com", "shopify"),
    "Wix": ("wixstatic.com", "wix.com"),
    "Squarespace": ("squarespace.com", "static1.squarespace"),
    "Webflow": ("webflow.com", "webflow.js"),
    "Drupal": ("drupal.js", "/sites/default/files"),
}

FRAMEWORK_SIGNATURES = {
    "Next.js": ("_next/static", "__NEXT_DATA__"),
    "Nuxt": ("_nuxt/",),
    "React": ("react", "data-reactroot"),
    "Vue": ("vue.js", "vue.min.js", "data-v-"),
    "Angular": ("ng-version", "angular"),
    "jQuery": ("jquery",),
}

ANALYTICS_SIGNATURES = {
    "Google Analytics": ("googletagmanager.com/gtag", "google-analytics.com", "gtag("),
    "Google Tag Manager": ("googletagmanager.com/gtm.js",),
    "Facebook Pixel": ("connect.facebook.net", "fbq("),
    "Hotjar": ("hotjar.com",),
    "Plausible": ("plausible.io",),
}

CDN_HEADERS = {
    "cf-ray": "Cloudflare",
    "x-amz-cf-id": "CloudFront",
    "x-served-by": "Fastly",
    "x-vercel-id": "Vercel",
    "x-akamai-transformed": "Akamai",
    "x-cdn": "CDN",
    "x-cache": "CDN",
}


def _detect(haystack: str, signatures: dict) -> list[str]:
    return [name for name, needles in signatures.items() if any(n in haystack for n in needles)]


def parse_html(html: str, base_url: Optional[str] = None) -> dict:
    """Extract the SEO-relevant elements of a page."""
    soup = BeautifulSoup(html, "lxml")

    result = {
        "title": None,
        "meta_description": None,
        "canonical": None,
        "headings": {"h1": [], "h2": [], "h3": []},
        "images": [],
        "links": {"internal": [], "external": []},
        "scripts": [],
        "schema": [],
        "open_graph": {},
        "twitter_card": {},
        "word_count": 0,
        "paragraph_count": 0,
        "has_microdata": False,
        "has_rdfa": False,
        "insecure_assets": 0,
    }

    title_tag = soup.find("title")
    if title_tag:
        result["title"] = title_tag.get_text(strip=True) or None

    for meta in soup.find_all("meta"):
        name = (meta.get("name") or "").lower()
        prop = (meta.get("property") or "").lower()
        content = meta.get("content", "")
        if name == "description":
            result["meta_description"] = content or None
        if prop.startswith("og:"):
            result["open_graph"][prop[3:]] = content
        if name.startswith("twitter:"):
            result["twitter_card"][name[8:]] = content

    canonical = soup.find("link", rel="canonical")
    if canonical:
        result["canonical"] = canonical.get("href")

    for level in ("h1", "h2", "h3"):
        for heading in soup.find_all(level):
            text = heading.get_text(strip=True)
            if text:
                result["headings"][level].append(text)

    for img in soup.find_all("img"):
        src = img.get("src", "")
        result["images"].append({"src": urljoin(base_url, src) if base_url and src else src,
                                 "alt": img.get("alt")})

    if base_url:
        base_domain = urlparse(base_url).netloc
        for a in soup.find_all("a", href=True):
            href = a.get("href", "")
            if not href or href.startswith("#") or href.startswith(("javascript:", "mailto:", "tel:")):
                continue
            full_url = urljoin(base_url, href)
            bucket = "internal" if urlparse(full_url).netloc == base_domain else "external"
            result["links"][bucket].append(full_url)

    for script in soup.find_all("script"):
        if script.get("type") == "application/ld+json":
            try:
                result["schema"].append(json.loads(script.string))
            except (json.JSONDecodeError, TypeError):
                pass
            continue
        src = script.get("src")
        if src:
            result["scripts"].append(urljoin(base_url, src) if base_url else src)

    secure_page = (base_url or "").startswith("https://")
    if secure_page:
        assets = [img["src"] for img in result["images"]] + result["scripts"]
        result["insecure_assets"] = sum(1 for src in assets if src.startswith("http://"))

    result["has_microdata"] = soup.find(attrs={"itemscope": True}) is not None
    result["has_rdfa"] = soup.find(attrs={"typeof": True}) is not None
    result["paragraph_count"] = len([p for p in soup.find_all("p") if p.get_text(strip=True)])

    for el in soup(["script", "style", "nav", "footer", "header", "noscript"]):
        el.decompose()
    body_text = soup.get_text(separator=" ", strip=True)
    result["word_count"] = len(re.findall(r"\b\w+\b", body_text))

    return result


def _sitemap_url_count(sitemap_xml: str | None) -> int:
    if not sitemap_xml:
        return 0
    return len(re.findall(r"<loc>", sitemap_xml, re.IGNORECASE))


def build_scan(parsed: dict, fetch_result: dict) -> dict:
    """On-page scan payload (seo, content, technology, security, robots, sitemap)."""
    html = fetch_result.get("html") or ""
    haystack = html.lower()
    headers = {k.lower(): v for k, v in (fetch_result.get("headers") or {}).items()}
    final_url = fetch_result.get("final_url") or fetch_result.get("url") or ""
    base_domain = urlparse(final_url).netloc

    images = parsed["images"]
    with_alt = sum(1 for img in images if img.get("alt"))
    internal = parsed["links"]["internal"]
    external = parsed["links"]["external"]

    cdn = next((provider for header, provider in CDN_HEADERS.items() if header in headers), None)
    third_party = [src for src in parsed["scripts"] if urlparse(src).netloc not in ("", base_domain)]

    return {
        "seo": {
            "title": parsed["title"],
            "metaDescription": parsed["meta_description"],
            "canonical": parsed["canonical"],
            "headings": {
                "h1Count": len(parsed["headings"]["h1"]),
                "h2Count": len(parsed["headings"]["h2"]),
                "h3Count": len(parsed["headings"]["h3"]),
            },
            "schemaMarkup": parsed["schema"],
            "openGraph": parsed["open_graph"],
            "twitterCard": parsed["twitter_card"],
        },
        "content": {
            "wordCount": parsed["word_count"],
            "paragraphCount": parsed["paragraph_count"],
            "images": {
                "total": len(images),
                "withAlt": with_alt,
                "altCoverage": round(with_alt / len(images) * 100) if images else 0,
            },
            "links": {
                "total": len(internal) + len(external),
                "internal": len(internal),
                "external": len(external),
                "broken": 0,
            },
        },
        "technology": {
            "cms": next(iter(_detect(haystack, CMS_SIGNATURES)), None),
            "frameworks": _detect(haystack, FRAMEWORK_SIGNATURES),
            "analytics": _detect(haystack, ANALYTICS_SIGNATURES),
            "thirdPartyScripts": third_party,
        },
        "security": {
            "isHTTPS": final_url.startswith("https://"),
            "cdn": cdn,
            "mixedContent": parsed["insecure_assets"] > 0,
        },
        "robotsTxt": {"exists": bool(fetch_result.get("robots_txt"))},
        "sitemap": {
            "exists": bool(fetch_result.get("sitemap_xml")),
            "urlCount": _sitemap_url_count(fetch_result.get("sitemap_xml")),
        },
    }


def build_technical_checks(parsed: dict, fetch_result: dict) -> dict:
    """Technical SEO checks (robots, sitemap, SSL, meta tags, structured data), each scored 0-100."""
    robots_txt = fetch_result.get("robots_txt") or ""
    sitemap_xml = fetch_result.get("sitemap_xml") or ""
    final_url = fetch_result.get("final_url") or ""

    if robots_txt:
        robots = {
            "exists": True,
            "hasUserAgent": "user-agent" in robots_txt.lower(),
            "hasSitemap": "sitemap" in robots_txt.lower(),
        }
        robots["score"] = 100 if robots["hasUserAgent"] else 50
    else:
        robots = {"exists": False, "score": 0, "issue": "No robots.txt found"}

    if sitemap_xml:
        sitemap = {
            "exists": True,
            "url": fetch_result.get("sitemap_url"),
            "isValid": "</urlset>" in sitemap_xml or "</sitemapindex>" in sitemap_xml,
            "score": 100,
        }
    else:
        sitemap = {"exists": False, "score": 0, "issue": "No XML sitemap found"}

    has_ssl = final_url.startswith("https://")
    ssl = {"hasSSL": has_ssl, "score": 100 if has_ssl else 0}

    title = parsed["title"] or ""
    description = parsed["meta_description"] or ""
    meta = {
        "hasTitle": bool(title),
        "titleLength": len(title),
        "hasDescription": bool(description),
        "descriptionLength": len(description),
        "hasH1": bool(parsed["headings"]["h1"]),
        "hasCanonical": bool(parsed["canonical"]),
        "title": title[:100] or None,
        "description": description[:200] or None,
    }
    meta_score = 10
    if 30 <= meta["titleLength"] <= 60:
        meta_score += 30
    if 120 <= meta["descriptionLength"] <= 160:
        meta_score += 30
    if meta["hasH1"]:
        meta_score += 20
    if meta["hasCanonical"]:
        meta_score += 10
    meta["score"] = min(meta_score, 100)

    has_json_ld = bool(parsed["schema"])
    structured_score = (50 if has_json_ld else 0) + (30 if parsed["has_microdata"] else 0) \
        + (20 if parsed["has_rdfa"] else 0)
    structured = {
        "hasStructuredData": has_json_ld or parsed["has_microdata"] or parsed["has_rdfa"],
        "jsonLd": has_json_ld,
        "microdata": parsed["has_microdata"],
        "rdfa": parsed["has_rdfa"],
        "count": len(parsed["schema"]),
        "score": min(structured_score, 100),
    }

    return {
        "robotsTxt": robots,
        "sitemap": sitemap,
        "ssl": ssl,
        "metaTags": meta,
        "structuredData": structured,
        "headings": {
            "h1Count": len(parsed["headings"]["h1"]),
            "h2Count": len(parsed["headings"]["h2"]),
            "h3Count": len(parsed["headings"]["h3"]),
        },
    }
