"""Polling display model behind the map: feeds, panels, filters and status."""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Literal, Tuple

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from .config import RegionConfig
from .embed import process_embed_url
from .models import Location, NormalizedIncident, TrafficIncident, WeatherAlert
from .taxonomy import highest_alert_level, highest_incident_severity
from .time_utils import format_time_since, sort_key, utc_now

logger = logging.getLogger(__name__)

PanelKind = Literal["location", "traffic", "local"]
Condition = Literal["normal", "advisory", "alert"]

PANEL_CLOSE_DELAY_SECONDS = 0.3
EMPTY_INCIDENTS_MESSAGE = "No reported incidents in the last 7 days."
LOCATION_TYPES = ("restaurant", "marina", "bar")


class FeedState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERRORED = "errored"


@dataclass
class DataFeed:
    """One data kind re-fetched on a fixed interval regardless of prior outcome."""

    name: str
    loader: Callable[[], Awaitable[Any]]
    interval_minutes: int
    state: FeedState = FeedState.IDLE
    result: Any = None
    error: str | None = None
    last_updated: datetime | None = None

    async def refresh(self) -> FeedState:
        self.state = FeedState.LOADING
        try:
            value = await self.loader()
        except Exception as exc:
            # previous result stays on screen until the next interval
            logger.warning("Feed %s failed: %s", self.name, exc)
            self.error = str(exc)
            self.state = FeedState.ERRORED
            return self.state
        self.result = value
        self.error = None
        self.last_updated = utc_now()
        self.state = FeedState.LOADED
        return self.state


def _loop_call_later(delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
    return asyncio.get_running_loop().call_later(delay, callback)


class PanelController:
    """At most one detail panel open; selections clear shortly after closing."""

    def __init__(
        self,
        call_later: Callable[[float, Callable[[], None]], Any] = _loop_call_later,
        close_delay: float = PANEL_CLOSE_DELAY_SECONDS,
    ) -> None:
        self._call_later = call_later
        self.close_delay = close_delay
        self.open_panel: PanelKind | None = None
        self.selections: Dict[str, Any] = {"location": None, "traffic": None, "local": None}
        self._pending: Dict[str, Any] = {}

    def open(self, kind: PanelKind, item: Any) -> None:
        pending = self._pending.pop(kind, None)
        if pending is not None:
            pending.cancel()
        self.selections[kind] = item
        self.open_panel = kind

    def close(self) -> None:
        kind = self.open_panel
        if kind is None:
            return
        self.open_panel = None

        def clear() -> None:
            self._pending.pop(kind, None)
            self.selections[kind] = None

        self._pending[kind] = self._call_later(self.close_delay, clear)

    def is_open(self, kind: PanelKind) -> bool:
        return self.open_panel == kind

    def selected(self) -> Any:
        if self.open_panel is None:
            return None
        return self.selections[self.open_panel]

    def camera_url(self, parent: str = "localhost") -> str | None:
        location = self.selections["location"]
        if not isinstance(location, Location):
            return None
        return process_embed_url(location.cam_embed_url, parent=parent)


def _has_coordinates(incident: NormalizedIncident) -> bool:
    if incident.lat is None or incident.lng is None:
        return False
    return not (math.isnan(incident.lat) or math.isnan(incident.lng))


@dataclass
class MarkerFilters:
    active_types: set[str] = field(default_factory=lambda: set(LOCATION_TYPES))
    search_query: str = ""
    show_traffic: bool = True
    show_local: bool = True

    def toggle_type(self, location_type: str) -> bool:
        """Flip one type filter. Refuses to turn off the last active type."""
        updated = set(self.active_types)
        if location_type in updated:
            updated.discard(location_type)
        else:
            updated.add(location_type)
        if not updated:
            return False
        self.active_types = updated
        return True

    def location_visible(self, location: Location) -> bool:
        query = self.search_query.strip().lower()
        matches_search = not query or query in location.name.lower()
        return matches_search and location.type in self.active_types

    def visible_locations(self, locations: Iterable[Location]) -> List[Location]:
        return [loc for loc in locations if self.location_visible(loc)]

    def traffic_layer(
        self,
        traffic: Iterable[TrafficIncident],
        local: Iterable[NormalizedIncident],
    ) -> Tuple[List[TrafficIncident], List[NormalizedIncident]]:
        """Road incidents plus local accidents, drawn together on the traffic layer."""
        if not self.show_traffic:
            return [], []
        accidents = [i for i in local if i.type == "accident" and _has_coordinates(i)]
        return list(traffic), accidents

    def local_layer(self, local: Iterable[NormalizedIncident]) -> List[NormalizedIncident]:
        if not self.show_local:
            return []
        return [
            i for i in local
            if _has_coordinates(i) and not (self.show_traffic and i.type == "accident")
        ]

    def visible_incident_count(self, traffic: List[TrafficIncident], local: List[NormalizedIncident]) -> int:
        road, accidents = self.traffic_layer(traffic, local)
        return len(road) + len(accidents) + len(self.local_layer(local))


def render_incident_list(incidents: Iterable[NormalizedIncident], now: datetime | None = None) -> str:
    ordered = sorted(incidents, key=lambda i: sort_key(i.timestamp), reverse=True)
    if not ordered:
        return EMPTY_INCIDENTS_MESSAGE
    lines = []
    for incident in ordered:
        when = format_time_since(incident.timestamp, now=now)
        lines.append(f"[{incident.severity}] {incident.title} ({incident.source}, {when})")
    return "\n".join(lines)


def status_condition(alerts: Iterable[WeatherAlert], traffic: Iterable[TrafficIncident]) -> Condition:
    level = highest_alert_level(alerts)
    if level == "warning":
        return "alert"
    if level in {"watch", "advisory"}:
        return "advisory"
    if highest_incident_severity(traffic) is not None:
        return "advisory"
    return "normal"


FEED_KINDS = ("lake_status", "traffic", "weather_alerts", "local_intelligence", "locations")


class MapDisplay:
    """Wires the service to one interval job per data kind."""

    def __init__(
        self,
        service: Any,
        region: RegionConfig | None = None,
        scheduler: AsyncIOScheduler | None = None,
        on_refresh: Callable[[str], None] | None = None,
        embed_parent: str = "localhost",
    ) -> None:
        self.region = region or RegionConfig()
        self.scheduler = scheduler or AsyncIOScheduler()
        self.on_refresh = on_refresh
        self.embed_parent = embed_parent
        loaders = {
            "lake_status": service.lake_status,
            "traffic": service.traffic_incidents,
            "weather_alerts": service.weather_alerts,
            "local_intelligence": service.local_intelligence,
            "locations": service.locations,
        }
        self.feeds: Dict[str, DataFeed] = {
            kind: DataFeed(kind, loaders[kind], self.region.interval_for(kind)) for kind in FEED_KINDS
        }
        self.panels = PanelController()
        self.filters = MarkerFilters()

    @staticmethod
    def job_id(kind: str) -> str:
        return f"feed:{kind}"

    def _notify(self, kind: str) -> None:
        if self.on_refresh is not None:
            self.on_refresh(kind)

    async def refresh(self, kind: str) -> FeedState:
        state = await self.feeds[kind].refresh()
        self._notify(kind)
        return state

    async def start(self) -> None:
        """Load every feed once, then keep each on its own interval."""
        await asyncio.gather(*(feed.refresh() for feed in self.feeds.values()))
        self._notify("initial")
        for kind, feed in self.feeds.items():
            self.scheduler.add_job(
                self.refresh,
                "interval",
                args=[kind],
                minutes=feed.interval_minutes,
                id=self.job_id(kind),
                replace_existing=True,
            )
        if not self.scheduler.running:
            self.scheduler.start()
        logger.info("Display started with %d feeds", len(self.feeds))

    def stop(self) -> None:
        for kind in self.feeds:
            try:
                self.scheduler.remove_job(self.job_id(kind))
            except JobLookupError:
                pass
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    def _result(self, kind: str, default: Any) -> Any:
        value = self.feeds[kind].result
        return default if value is None else value

    @property
    def local_incidents(self) -> List[NormalizedIncident]:
        incidents, _story = self._result("local_intelligence", ([], None))
        return incidents

    @property
    def top_story(self) -> Any:
        _incidents, story = self._result("local_intelligence", ([], None))
        return story

    def condition(self) -> Condition:
        return status_condition(self._result("weather_alerts", []), self._result("traffic", []))

    def _location_wire(self, location: Location) -> dict:
        payload = location.to_wire()
        if location.cam_embed_url:
            payload["camEmbedUrl"] = process_embed_url(location.cam_embed_url, parent=self.embed_parent)
        return payload

    def snapshot(self) -> dict:
        locations = self.filters.visible_locations(self._result("locations", []))
        road, accidents = self.filters.traffic_layer(self._result("traffic", []), self.local_incidents)
        story = self.top_story
        lake = self.feeds["lake_status"].result
        return {
            "condition": self.condition(),
            "lakeStatus": lake.to_wire() if lake is not None else None,
            "topStory": story.to_wire() if story is not None else None,
            "locations": [self._location_wire(loc) for loc in locations],
            "trafficIncidents": [i.to_wire() for i in road] + [i.to_wire() for i in accidents],
            "localIncidents": [i.to_wire() for i in self.filters.local_layer(self.local_incidents)],
            "weatherAlerts": [a.to_wire() for a in self._result("weather_alerts", [])],
            "feeds": {kind: feed.state.value for kind, feed in self.feeds.items()},
        }
