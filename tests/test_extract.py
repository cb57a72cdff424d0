from datetime import timedelta

import pytest

from lakewatch.connectors.city import city_parser
from lakewatch.extract import RegexArticleParser, SoupArticleParser, build_parser, find_date_token
from lakewatch.time_utils import parse_published_datetime, utc_now

BASE = "https://www.lakeexpo.com"

THREE_HEADINGS = """
<html><body>
<h2><a href="/news/crime/deputies-respond-dock-theft">Deputies respond to dock theft</a></h2>
<h3><a href="/news/crime/sheriff-warns-of-scam-calls">Sheriff warns of scam calls</a></h3>
<h4><a href="/news/crime/man-arrested-after-pursuit">Man arrested after pursuit</a></h4>
</body></html>
"""

PARSERS = [RegexArticleParser, SoupArticleParser]


@pytest.mark.parametrize("parser_cls", PARSERS)
def test_headings_without_paragraphs_default_summary_and_date(parser_cls) -> None:
    parser = parser_cls(base_url=BASE, id_prefix="lakeexpo")
    before = utc_now()
    articles = parser.extract_articles(THREE_HEADINGS)

    assert len(articles) == 3
    for article in articles:
        assert article.summary == article.title
        published = parse_published_datetime(article.published_at)
        assert published is not None
        assert before - timedelta(seconds=5) <= published <= utc_now() + timedelta(seconds=5)

    assert articles[0].url == f"{BASE}/news/crime/deputies-respond-dock-theft"
    assert articles[0].id == "lakeexpo-deputies-respond-dock-theft"


@pytest.mark.parametrize("parser_cls", PARSERS)
def test_paragraph_and_date_are_picked_up(parser_cls) -> None:
    paragraph = "Crews worked through the night to contain a fire at a storage building near the water."
    html = (
        '<h3><a href="https://www.lakeexpo.com/news/crime/storage-fire">Storage building fire contained</a></h3>'
        "<span>3/7/2026</span>"
        f"<p>{paragraph}</p>"
    )
    parser = parser_cls(base_url=BASE, id_prefix="lakeexpo")
    articles = parser.extract_articles(html)

    assert len(articles) == 1
    assert articles[0].summary == paragraph
    assert articles[0].published_at == "3/7/2026"


@pytest.mark.parametrize("parser_cls", PARSERS)
def test_summary_does_not_borrow_next_story_paragraph(parser_cls) -> None:
    paragraph = "The second story has a paragraph that is long enough to count as a summary here."
    html = (
        '<h2><a href="/news/first-story">First story without a summary</a></h2>'
        '<h2><a href="/news/second-story">Second story with a summary</a></h2>'
        f"<p>{paragraph}</p>"
    )
    articles = parser_cls(base_url=BASE, id_prefix="lakeexpo").extract_articles(html)

    assert [a.title for a in articles] == ["First story without a summary", "Second story with a summary"]
    assert articles[0].summary == articles[0].title
    assert articles[1].summary == paragraph


@pytest.mark.parametrize("parser_cls", PARSERS)
def test_short_titles_and_duplicate_urls_are_skipped(parser_cls) -> None:
    html = (
        '<h2><a href="/news/a">Too short</a></h2>'
        '<h2><a href="/news/boat-rescue">Boat rescue on the main channel</a></h2>'
        '<h2><a href="https://www.lakeexpo.com/news/boat-rescue">Boat rescue on the main channel again</a></h2>'
    )
    articles = parser_cls(base_url=BASE, id_prefix="lakeexpo").extract_articles(html)
    assert [a.url for a in articles] == [f"{BASE}/news/boat-rescue"]


@pytest.mark.parametrize("parser_cls", PARSERS)
def test_unsafe_links_and_entities_are_sanitized(parser_cls) -> None:
    html = (
        '<h2><a href="javascript:alert(1)">Click here for the latest update</a></h2>'
        '<h2><a href="/news/marina">Lake &amp; Marina update today</a></h2>'
    )
    articles = parser_cls(base_url=BASE, id_prefix="lakeexpo").extract_articles(html)
    assert articles[0].url == "#"
    assert articles[1].title == "Lake &amp; Marina update today"


@pytest.mark.parametrize("kind", ["regex", "soup"])
def test_city_parser_falls_back_to_news_section(kind: str) -> None:
    html = (
        "<html><body><div>Welcome</div>"
        '<section class="home-news"><a href="/news/trash-pickup">Trash pickup schedule changes this week</a></section>'
        "</body></html>"
    )
    announcements = city_parser(kind).extract_articles(html)
    assert len(announcements) == 1
    assert announcements[0].url == "https://cityoflakeozark.net/news/trash-pickup"
    assert announcements[0].id == "city-trash-pickup"


def test_city_parser_skips_fallback_when_headings_match() -> None:
    html = (
        '<h1><a href="/notice/water-main">Water main repair on Bagnell Dam Blvd</a></h1>'
        '<section class="news"><a href="/news/other">Another announcement in the news block</a></section>'
    )
    announcements = city_parser().extract_articles(html)
    assert [a.title for a in announcements] == ["Water main repair on Bagnell Dam Blvd"]


def test_section_path_fallback_for_listing_pages() -> None:
    html = '<ul><li><a href="/community/community_news/fish-fry">Fish fry at the fire station Friday</a></li></ul>'
    articles = RegexArticleParser(base_url=BASE, id_prefix="lakeexpo").extract_articles(html)
    assert [a.url for a in articles] == [f"{BASE}/community/community_news/fish-fry"]


def test_max_items_caps_output() -> None:
    parser = build_parser("regex", BASE, "lakeexpo", max_items=2)
    assert len(parser.extract_articles(THREE_HEADINGS)) == 2


def test_empty_input_yields_nothing() -> None:
    assert RegexArticleParser(base_url=BASE, id_prefix="x").extract_articles("") == []
    assert SoupArticleParser(base_url=BASE, id_prefix="x").extract_articles("") == []


def test_find_date_token_formats() -> None:
    assert find_date_token("Posted 12/31/2025 by staff") == "12/31/2025"
    assert find_date_token("Updated 2026-01-02") == "2026-01-02"
    assert find_date_token("no date") is None
