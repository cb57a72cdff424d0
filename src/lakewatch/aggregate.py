"""Merge, dedupe and normalize items gathered from independently failing sources."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Awaitable, Iterable, List, Sequence

from .config import RegionConfig
from .gazetteers import LAKE_OZARK_POINT, geocode
from .models import NormalizedIncident, RawArticle, TopStory
from .taxonomy import determine_incident_severity, normalize_incident_type
from .time_utils import parse_published_datetime, sort_key, to_iso, utc_now

logger = logging.getLogger(__name__)

LAKE_EXPO_SOURCE = "Lake Expo"
CITY_SOURCE = "City of Lake Ozark"


async def gather_settled(*awaitables: Awaitable[Any], default: Any = None) -> List[Any]:
    """Run awaitables concurrently; a failure yields ``default`` (an empty list when unset)."""
    results = await asyncio.gather(*awaitables, return_exceptions=True)
    settled: List[Any] = []
    for result in results:
        if isinstance(result, BaseException) and not isinstance(result, Exception):
            raise result
        if isinstance(result, Exception):
            logger.debug("Source failed, contributing empty result: %r", result)
            settled.append([] if default is None else default)
        else:
            settled.append(result)
    return settled


def merge_articles(*sources: Iterable[RawArticle], cap: int | None = 50) -> List[RawArticle]:
    seen: set[str] = set()
    merged: List[RawArticle] = []
    for source in sources:
        for article in source:
            if article.url in seen:
                continue
            seen.add(article.url)
            merged.append(article)
    merged.sort(key=lambda a: sort_key(a.published_at), reverse=True)
    return merged[:cap] if cap is not None else merged


def is_retained(published_at: str | None, retention_days: int, now: datetime | None = None) -> bool:
    """Keep items inside the window; unparseable dates are kept and treated as recent."""
    dt = parse_published_datetime(published_at)
    if dt is None:
        return True
    current = now or utc_now()
    return dt >= current - timedelta(days=retention_days)


def article_to_incident(
    article: RawArticle,
    source: str,
    *,
    region: RegionConfig | None = None,
    pin: tuple[float, float] | None = None,
) -> NormalizedIncident:
    category = normalize_incident_type("", article.title, article.summary)
    severity = determine_incident_severity(category, article.title, article.summary)
    if pin is not None:
        lat, lng = pin
    else:
        text = f"{article.title} {article.summary}"
        lat, lng = geocode(text, article.id, region)
    return NormalizedIncident(
        id=article.id,
        title=article.title,
        type=category,
        severity=severity,
        source=source,
        source_url=article.url or None,
        timestamp=to_iso(article.published_at),
        lat=lat,
        lng=lng,
        summary=article.summary,
    )


def build_local_incidents(
    articles: Sequence[RawArticle],
    announcements: Sequence[RawArticle],
    *,
    region: RegionConfig | None = None,
    now: datetime | None = None,
) -> List[NormalizedIncident]:
    cfg = region or RegionConfig()
    incidents: List[NormalizedIncident] = []
    for article in articles:
        if is_retained(article.published_at, cfg.retention_days, now):
            incidents.append(article_to_incident(article, LAKE_EXPO_SOURCE, region=cfg))
    for announcement in announcements:
        if is_retained(announcement.published_at, cfg.retention_days, now):
            incidents.append(article_to_incident(announcement, CITY_SOURCE, region=cfg, pin=LAKE_OZARK_POINT))
    incidents.sort(key=lambda i: sort_key(i.timestamp), reverse=True)
    return incidents


def pick_top_story(articles: Sequence[RawArticle], announcements: Sequence[RawArticle]) -> TopStory | None:
    stories: List[TopStory] = []
    for items, source in ((articles, LAKE_EXPO_SOURCE), (announcements, CITY_SOURCE)):
        if not items:
            continue
        first = items[0]
        stories.append(
            TopStory(
                id=first.id,
                headline=first.title,
                summary=first.summary,
                source=source,
                source_url=first.url or None,
                timestamp=to_iso(first.published_at),
            )
        )
    if not stories:
        return None
    stories.sort(key=lambda s: sort_key(s.timestamp), reverse=True)
    return stories[0]
