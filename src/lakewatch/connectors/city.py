"""City of Lake Ozark announcements connector (home page scrape)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

import httpx

from ..extract import FALLBACK_NEWS_SECTION, ArticleParser, build_parser
from ..models import RawArticle
from .base import FETCH_ERRORS, PageSource, fetch_text

logger = logging.getLogger(__name__)

CITY_BASE_URL = "https://cityoflakeozark.net"


def city_parser(kind: str = "regex", cap: int = 30) -> ArticleParser:
    # Headings h1-h4; the news-section fallback only runs when headings yield nothing.
    return build_parser(
        kind,
        CITY_BASE_URL,
        "city",
        heading_levels="1-4",
        max_items=cap,
        fallback=FALLBACK_NEWS_SECTION,
        fallback_threshold=1,
    )


@dataclass
class CityAnnouncementsConnector:
    client: httpx.AsyncClient
    parser: ArticleParser | None = None
    source: PageSource = field(default_factory=lambda: PageSource("City of Lake Ozark", f"{CITY_BASE_URL}/"))
    cap: int = 30

    def __post_init__(self) -> None:
        if self.parser is None:
            self.parser = city_parser(cap=self.cap)

    async def fetch(self) -> List[RawArticle]:
        try:
            html = await fetch_text(self.client, self.source.url)
        except FETCH_ERRORS as exc:
            logger.warning("City announcements fetch failed: %s", exc)
            return []
        announcements = self.parser.extract_articles(html)
        logger.debug("%s: extracted %d announcements", self.source.name, len(announcements))
        return announcements
