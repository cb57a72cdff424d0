"""HTML article extraction behind a small parser interface.

Callers only depend on ``ArticleParser.extract_articles(html)``. Two
strategies are provided: a tolerant regex scanner (the default) and a
BeautifulSoup DOM walker.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from typing import List, Protocol
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from .models import RawArticle
from .sanitize import sanitize_html, sanitize_url, truncate_text
from .time_utils import utc_now_iso

SUMMARY_WINDOW = 500
DATE_WINDOW = 1000
MIN_TITLE_LENGTH = 11
SUMMARY_MAX_LENGTH = 200

_PARAGRAPH_RE = re.compile(r"<p[^>]*>([^<]{50,200})", re.IGNORECASE)
_DATE_RE = re.compile(r"(\d{1,2}/\d{1,2}/\d{4})|(\d{4}-\d{2}-\d{2})")
_WS_RE = re.compile(r"\s+")
_SECTION_PATH_LINK_RE = re.compile(
    r"<a[^>]*href=[\"'](/(?:news|community)/[^\"']+)[\"'][^>]*>([^<]{20,})</a>",
    re.IGNORECASE,
)
_NEWS_SECTION_RE = re.compile(
    r"<section[^>]*class=[\"'][^\"']*news[^\"']*[\"'][^>]*>([\s\S]{0,5000})</section>",
    re.IGNORECASE,
)
_LONG_LINK_RE = re.compile(r"<a[^>]*href=[\"']([^\"']+)[\"'][^>]*>([^<]{20,})</a>", re.IGNORECASE)

FALLBACK_SECTION_PATHS = "section_paths"
FALLBACK_NEWS_SECTION = "news_section"


class ArticleParser(Protocol):
    def extract_articles(self, html: str) -> List[RawArticle]:
        ...


def _heading_pattern(levels: str) -> re.Pattern[str]:
    return re.compile(
        rf"<h[{levels}][^>]*>.*?<a[^>]*href=[\"']([^\"']+)[\"'][^>]*>([^<]+)</a>",
        re.IGNORECASE,
    )


def find_date_token(text: str) -> str | None:
    match = _DATE_RE.search(text or "")
    return match.group(0) if match else None


def find_summary(section: str) -> str | None:
    match = _PARAGRAPH_RE.search(section or "")
    if not match:
        return None
    return _WS_RE.sub(" ", match.group(1).strip())


@dataclass
class _Collector:
    base_url: str
    id_prefix: str
    max_items: int

    def __post_init__(self) -> None:
        self.articles: List[RawArticle] = []
        self.seen_urls: set[str] = set()

    @property
    def full(self) -> bool:
        return len(self.articles) >= self.max_items

    def absolute(self, href: str) -> str:
        href = href.strip()
        if href.lower().startswith("http"):
            return href
        return urljoin(self.base_url, href)

    def add(self, href: str, title: str, summary: str | None = None, published_at: str | None = None) -> bool:
        url = self.absolute(href)
        title = title.strip()
        if not title or len(title) < MIN_TITLE_LENGTH or url in self.seen_urls:
            return False
        self.seen_urls.add(url)
        clean_url = sanitize_url(url)
        clean_title = sanitize_html(title)
        clean_summary = truncate_text(sanitize_html(summary or title), SUMMARY_MAX_LENGTH)
        slug = clean_url.split("/")[-1] if clean_url else ""
        self.articles.append(
            RawArticle(
                id=f"{self.id_prefix}-{slug or int(time.time() * 1000)}",
                title=clean_title,
                summary=clean_summary,
                url=clean_url,
                published_at=published_at or utc_now_iso(),
            )
        )
        return True


@dataclass
class RegexArticleParser:
    """Scan headings that wrap an anchor, in document order."""

    base_url: str
    id_prefix: str
    heading_levels: str = "2-4"
    max_items: int = 50
    fallback: str = FALLBACK_SECTION_PATHS
    fallback_threshold: int = 5

    def extract_articles(self, html: str) -> List[RawArticle]:
        if not html or not isinstance(html, str):
            return []
        collector = _Collector(self.base_url, self.id_prefix, self.max_items)
        matches = list(_heading_pattern(self.heading_levels).finditer(html))
        for idx, match in enumerate(matches):
            if collector.full:
                break
            start = match.start()
            next_start = matches[idx + 1].start() if idx + 1 < len(matches) else len(html)
            section = html[start : min(start + SUMMARY_WINDOW, max(next_start, match.end()))]
            collector.add(
                match.group(1),
                match.group(2),
                summary=find_summary(section),
                published_at=find_date_token(html[start : start + DATE_WINDOW]),
            )

        if len(collector.articles) < self.fallback_threshold:
            self._run_fallback(html, collector)
        return collector.articles

    def _run_fallback(self, html: str, collector: _Collector) -> None:
        if self.fallback == FALLBACK_NEWS_SECTION:
            section = _NEWS_SECTION_RE.search(html)
            if not section:
                return
            links = _LONG_LINK_RE.finditer(section.group(1))
        else:
            links = _SECTION_PATH_LINK_RE.finditer(html)
        for link in links:
            if collector.full:
                break
            collector.add(link.group(1), link.group(2))


@dataclass
class SoupArticleParser:
    """Same contract as ``RegexArticleParser`` using DOM queries."""

    base_url: str
    id_prefix: str
    heading_levels: str = "2-4"
    max_items: int = 50
    fallback: str = FALLBACK_SECTION_PATHS
    fallback_threshold: int = 5

    def _heading_names(self) -> list[str]:
        low, _, high = self.heading_levels.partition("-")
        high = high or low
        return [f"h{level}" for level in range(int(low), int(high) + 1)]

    def extract_articles(self, html: str) -> List[RawArticle]:
        if not html or not isinstance(html, str):
            return []
        soup = BeautifulSoup(html, "html.parser")
        collector = _Collector(self.base_url, self.id_prefix, self.max_items)
        names = self._heading_names()
        for heading in soup.find_all(names):
            if collector.full:
                break
            anchor = heading.find("a", href=True)
            if anchor is None:
                continue
            title = anchor.get_text()
            summary, published = self._look_ahead(heading, names)
            collector.add(str(anchor["href"]), title, summary=summary, published_at=published)

        if len(collector.articles) < self.fallback_threshold:
            for href, text in self._fallback_links(soup):
                if collector.full:
                    break
                if len(text) >= 20:
                    collector.add(href, text)
        return collector.articles

    def _look_ahead(self, heading: Tag, names: list[str]) -> tuple[str | None, str | None]:
        summary: str | None = None
        consumed = 0
        buffer: list[str] = [heading.get_text(" ")]
        for element in heading.next_elements:
            if isinstance(element, Tag):
                if element.name in names:
                    break
                if summary is None and element.name == "p":
                    text = element.get_text()
                    if 50 <= len(text.strip()) <= SUMMARY_MAX_LENGTH:
                        summary = _WS_RE.sub(" ", text.strip())
                continue
            text = str(element)
            buffer.append(text)
            consumed += len(text)
            if consumed >= DATE_WINDOW:
                break
        return summary, find_date_token(" ".join(buffer)[:DATE_WINDOW])

    def _fallback_links(self, soup: BeautifulSoup) -> list[tuple[str, str]]:
        if self.fallback == FALLBACK_NEWS_SECTION:
            scope = None
            for section in soup.find_all("section"):
                classes = " ".join(section.get("class") or [])
                if "news" in classes:
                    scope = section
                    break
            if scope is None:
                return []
            anchors = scope.find_all("a", href=True)
        else:
            anchors = soup.find_all("a", href=re.compile(r"^/(news|community)/"))
        return [(str(a["href"]), a.get_text().strip()) for a in anchors]


def build_parser(kind: str, base_url: str, id_prefix: str, **options) -> ArticleParser:
    if kind == "soup":
        return SoupArticleParser(base_url=base_url, id_prefix=id_prefix, **options)
    return RegexArticleParser(base_url=base_url, id_prefix=id_prefix, **options)
