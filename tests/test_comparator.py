import pytest

from sitehealth.comparator import compare_sites, overall_verdict
from sitehealth.dimensions import performance, seo


def _lighthouse(score):
    return {"lighthouse": {"categoryScores": {"performance": score}}}


def _dimension(result, name):
    return next((d for d in result["dimensions"] if d["dimension"] == name), None)


def test_faster_site_gets_strength(site):
    result = compare_sites(
        site("mine.example", lighthouse={"categoryScores": {"performance": 90}}),
        site("rival.example", lighthouse={"categoryScores": {"performance": 70}}),
    )

    perf = _dimension(result, "performance")
    assert perf["winner"] == "yours"
    assert perf["difference"] == 20
    assert perf["gap"] == 20
    assert any("significantly faster" in note for note in result["summary"]["strengths"])
    assert result["overallWinner"] == "yours"


def test_backlink_deficit_is_a_weakness(site):
    result = compare_sites(
        site(backlinks={"totalBacklinks": 50}),
        site(backlinks={"totalBacklinks": 200}),
    )

    links = _dimension(result, "backlinks")
    assert links["winner"] == "competitor"
    assert links["difference"] == -150
    assert "Competitor has 150 more backlinks" in result["summary"]["weaknesses"]
    assert result["overallWinner"] == "competitor"


def test_missing_traffic_on_both_sides_is_omitted(site):
    result = compare_sites(site(**_lighthouse(80)), site(**_lighthouse(75)))

    assert _dimension(result, "traffic") is None
    assert "error" not in result


def test_seo_rubric_score(site):
    scan = {"seo": {
        "title": "A" * 45,
        "canonical": "https://a.example/",
        "openGraph": {"title": "A"},
        "schemaMarkup": [{"@type": "Organization"}],
    }}
    result = compare_sites(site(puppeteer=scan), site(puppeteer={"seo": {"title": "B"}}))

    seo_result = _dimension(result, "seo")
    assert seo_result["scores"] == {"yours": 55, "competitor": 10}
    assert seo_result["winner"] == "yours"


def test_seo_rubric_is_capped():
    full = {
        "hasTitle": True, "hasDescription": True, "hasCanonical": True,
        "titleLength": 45, "descriptionLength": 140,
        "headings": {"h1Count": 1, "h2Count": 2, "h3Count": 1},
        "hasOpenGraph": True, "hasTwitterCard": True, "structuredDataCount": 3,
    }

    assert seo.seo_score(full) == 100
    assert seo.seo_score({}) == 0


def test_threshold_is_strict(site):
    at_threshold = compare_sites(site(**_lighthouse(80)), site(**_lighthouse(70)))
    over_threshold = compare_sites(site(**_lighthouse(80.01)), site(**_lighthouse(70)))

    assert at_threshold["summary"]["strengths"] == []
    assert _dimension(at_threshold, "performance")["winner"] == "yours"
    assert _dimension(over_threshold, "performance")["difference"] == 10.01
    assert over_threshold["summary"]["strengths"] == [
        "Your site is significantly faster than the competitor (10.01 points ahead)",
    ]


def test_threshold_applies_to_raw_dimension_input():
    result = performance.compare(_lighthouse(80.01), _lighthouse(70))

    assert result["notes"][0][0] == "strengths"


@pytest.mark.parametrize("payload_a, payload_b", [
    (_lighthouse(90), _lighthouse(60)),
    ({"backlinks": {"totalBacklinks": 900}}, {"backlinks": {"totalBacklinks": 10}}),
    ({"traffic": {"metrics": {"monthlyVisits": 9000}}}, {"traffic": {"metrics": {"monthlyVisits": 100}}}),
])
def test_swapping_sides_swaps_winner(site, payload_a, payload_b):
    a, b = site(**payload_a), site(**payload_b)

    forward = compare_sites(a, b)
    backward = compare_sites(b, a)

    for one, other in zip(forward["dimensions"], backward["dimensions"]):
        assert one["dimension"] == other["dimension"]
        assert {one["winner"], other["winner"]} == {"yours", "competitor"}
    assert forward["overallWinner"] == "yours"
    assert backward["overallWinner"] == "competitor"


def test_equal_values_tie(site):
    result = compare_sites(
        site(backlinks={"totalBacklinks": 300}),
        site(backlinks={"totalBacklinks": 300}),
    )

    assert _dimension(result, "backlinks")["winner"] == "tie"
    assert result["overallWinner"] == "tie"
    assert result["summary"] == {"strengths": [], "weaknesses": [], "opportunities": [], "recommendations": []}


def test_traffic_difference_is_competitor_minus_yours(site):
    result = compare_sites(
        site(traffic={"metrics": {"monthlyVisits": 1000}}),
        site(traffic={"metrics": {"monthlyVisits": 5000}}),
    )

    traffic = _dimension(result, "traffic")
    assert traffic["difference"] == 4000
    assert traffic["winner"] == "competitor"
    assert "Competitor receives 4,000 more monthly visits" in result["summary"]["weaknesses"]


def test_one_sided_traffic_keeps_placeholders(site):
    result = compare_sites(
        site(traffic={"metrics": {"monthlyVisits": 1000}}),
        site(**_lighthouse(50)),
    )

    traffic = _dimension(result, "traffic")
    assert traffic["competitor"]["monthlyVisits"] == "N/A"
    assert traffic["difference"] == "N/A"
    assert traffic["winner"] == "tie"


def test_content_updates_comparison(site):
    mine = {"contentActivity": {"recentActivityCount": 2, "averagePostsPerMonth": 1}}
    theirs = {"contentActivity": {"recentActivityCount": 9, "averagePostsPerMonth": 8}}

    result = compare_sites(site(contentUpdates=mine), site(contentUpdates=theirs))

    updates = _dimension(result, "contentUpdates")
    assert updates["moreActive"] == "competitor"
    assert updates["contentGap"] == {"postsPerMonthDiff": 7, "recentActivityDiff": 7}
    assert "9 recent updates vs your 2" in updates["insight"]
    assert updates["yours"]["contentVelocity"] == "low"


def test_one_sided_content_updates_is_tie(site):
    result = compare_sites(
        site(contentUpdates={"contentActivity": {"recentActivityCount": 4}}),
        site(**_lighthouse(50)),
    )

    updates = _dimension(result, "contentUpdates")
    assert updates["winner"] == "tie"
    assert updates["moreActive"] == "N/A"


def test_instagram_engagement(site):
    result = compare_sites(
        site(instagram={"profile": {"followers": 1000, "avgEngagementRate": 4.5}}),
        site(instagram={"profile": {"followers": 3000, "avgEngagementRate": 2.0}}),
    )

    instagram = _dimension(result, "instagram")
    assert instagram["engagement"]["winner"] == "yours"
    assert instagram["followers"]["winner"] == "competitor"
    assert instagram["interactions"] is None
    assert any(note.startswith("Higher Instagram engagement rate") for note in result["summary"]["strengths"])


def test_verdict_counts_instagram_wins_but_not_losses():
    instagram_win = {"instagram": {"engagement": {"winner": "yours"}}}
    instagram_loss = {"instagram": {"engagement": {"winner": "competitor"}}}

    assert overall_verdict(instagram_win) == {"wins": 1, "losses": 0, "overallWinner": "yours"}
    assert overall_verdict(instagram_loss) == {"wins": 0, "losses": 0, "overallWinner": "tie"}


def test_verdict_ignores_descriptive_dimensions():
    results = {
        "performance": {"winner": "yours"},
        "backlinks": {"winner": "competitor"},
        "security": {"winner": "competitor"},
        "technology": {"winner": "competitor"},
    }

    assert overall_verdict(results) == {"wins": 1, "losses": 1, "overallWinner": "tie"}


def test_security_and_technology_notes(site, full_sources):
    insecure = dict(full_sources["puppeteer"])
    insecure["security"] = {"isHTTPS": False, "cdn": None, "mixedContent": False}
    insecure["technology"] = {"cms": None, "frameworks": ["jQuery"], "analytics": []}

    result = compare_sites(site(puppeteer=insecure), site(puppeteer=full_sources["puppeteer"]))

    security = _dimension(result, "security")
    assert security["winner"] == "competitor"
    assert security["points"] == {"yours": 3, "competitor": 5}
    assert "Not using HTTPS" in result["summary"]["weaknesses"]
    assert "Implement SSL certificate for security" in result["summary"]["recommendations"]
    assert "Implement CDN for better performance" in result["summary"]["opportunities"]

    technology = _dimension(result, "technology")
    assert technology["winner"] == "competitor"
    assert technology["sharedFrameworks"] == ["jQuery"]


def test_no_data_on_either_side(site):
    result = compare_sites(site(), site())

    assert result["error"] == "No data available for either site"
    assert result["dimensions"] == []
    assert result["overallWinner"] is None
