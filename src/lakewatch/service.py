"""Service facade wiring connectors, aggregation and feature flags together."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List

import httpx

from .aggregate import build_local_incidents, gather_settled, pick_top_story
from .config import RegionConfig
from .connectors import (
    CityAnnouncementsConnector,
    LakeExpoConnector,
    LakeStatusConnector,
    LocationStore,
    SupabaseLocationStore,
    TrafficConnector,
    WeatherAlertsConnector,
    city_parser,
)
from .connectors.lake_expo import LAKE_EXPO_BASE_URL
from .connectors.lake_status import unavailable_status
from .extract import build_parser
from .feature_flags import kind_enabled, load_feature_flags
from .models import LakeStatus, Location, NormalizedIncident, RawArticle, TopStory, TrafficIncident, WeatherAlert
from .settings import get_supabase_anon_key, get_supabase_url

logger = logging.getLogger(__name__)


@dataclass
class IntelligenceService:
    """Entry point for every data kind shown on the map.

    The HTTP client and the location store are injected so tests can pass
    an ``httpx.MockTransport``-backed client and an in-memory store.
    """

    client: httpx.AsyncClient
    region: RegionConfig = field(default_factory=RegionConfig)
    location_store: LocationStore | None = None
    flags: dict[str, Any] = field(default_factory=load_feature_flags)

    def __post_init__(self) -> None:
        parser_kind = str(self.flags.get("html_parser", "regex"))
        self.lake_expo = LakeExpoConnector(
            client=self.client,
            parser=build_parser(parser_kind, LAKE_EXPO_BASE_URL, "lakeexpo", max_items=self.region.article_cap),
            cap=self.region.article_cap,
        )
        self.city = CityAnnouncementsConnector(
            client=self.client,
            parser=city_parser(parser_kind, cap=self.region.announcement_cap),
            cap=self.region.announcement_cap,
        )
        self.weather = WeatherAlertsConnector(client=self.client, region=self.region)
        self.traffic = TrafficConnector(client=self.client, region=self.region)
        self.lake = LakeStatusConnector(client=self.client)
        if self.location_store is None:
            self.location_store = SupabaseLocationStore(
                client=self.client,
                base_url=get_supabase_url(),
                anon_key=get_supabase_anon_key(),
            )

    def _enabled(self, kind: str) -> bool:
        return kind_enabled(self.flags, kind)

    async def lake_expo_articles(self) -> List[RawArticle]:
        return await self.lake_expo.fetch()

    async def city_announcements(self) -> List[RawArticle]:
        return await self.city.fetch()

    async def _both_sources(self) -> tuple[List[RawArticle], List[RawArticle]]:
        articles, announcements = await gather_settled(self.lake_expo_articles(), self.city_announcements())
        return articles, announcements

    async def local_incidents(self) -> List[NormalizedIncident]:
        if not self._enabled("local_incidents"):
            return []
        articles, announcements = await self._both_sources()
        incidents = build_local_incidents(articles, announcements, region=self.region)
        logger.debug("Built %d local incidents", len(incidents))
        return incidents

    async def top_story(self) -> TopStory | None:
        if not self._enabled("top_story"):
            return None
        articles, announcements = await self._both_sources()
        return pick_top_story(articles, announcements)

    async def local_intelligence(self) -> tuple[List[NormalizedIncident], TopStory | None]:
        """Incidents and top story from a single pair of page fetches."""
        incidents: List[NormalizedIncident] = []
        story: TopStory | None = None
        if not (self._enabled("local_incidents") or self._enabled("top_story")):
            return incidents, story
        articles, announcements = await self._both_sources()
        if self._enabled("local_incidents"):
            incidents = build_local_incidents(articles, announcements, region=self.region)
        if self._enabled("top_story"):
            story = pick_top_story(articles, announcements)
        return incidents, story

    async def weather_alerts(self) -> List[WeatherAlert]:
        if not self._enabled("weather_alerts"):
            return []
        return await self.weather.fetch()

    async def traffic_incidents(self) -> List[TrafficIncident]:
        if not self._enabled("traffic"):
            return []
        return await self.traffic.fetch()

    async def lake_status(self) -> LakeStatus:
        if not self._enabled("lake_status"):
            return unavailable_status()
        return await self.lake.fetch()

    async def locations(self) -> List[Location]:
        return await self.location_store.list_locations()
