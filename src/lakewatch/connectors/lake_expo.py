"""Lake Expo news connector (crime and community listing pages)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

import httpx

from ..aggregate import gather_settled, merge_articles
from ..extract import ArticleParser, build_parser
from ..models import RawArticle
from .base import PageSource, fetch_text

logger = logging.getLogger(__name__)

LAKE_EXPO_BASE_URL = "https://www.lakeexpo.com"


def default_lake_expo_sources() -> list[PageSource]:
    return [
        PageSource("Lake Expo Crime", f"{LAKE_EXPO_BASE_URL}/news/crime"),
        PageSource("Lake Expo Community", f"{LAKE_EXPO_BASE_URL}/community/community_news"),
    ]


@dataclass
class LakeExpoConnector:
    client: httpx.AsyncClient
    parser: ArticleParser | None = None
    sources: list[PageSource] = field(default_factory=default_lake_expo_sources)
    cap: int = 50

    def __post_init__(self) -> None:
        if self.parser is None:
            self.parser = build_parser("regex", LAKE_EXPO_BASE_URL, "lakeexpo", max_items=self.cap)

    async def _fetch_source(self, source: PageSource) -> List[RawArticle]:
        html = await fetch_text(self.client, source.url)
        articles = self.parser.extract_articles(html)
        logger.debug("%s: extracted %d articles", source.name, len(articles))
        return articles

    async def fetch(self) -> List[RawArticle]:
        # A failed page contributes nothing; siblings still count.
        per_source = await gather_settled(*(self._fetch_source(s) for s in self.sources))
        return merge_articles(*per_source, cap=self.cap)
