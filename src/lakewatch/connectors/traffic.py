"""OpenStreetMap Overpass connector for construction, closures and road hazards."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List

import httpx

from ..config import RegionConfig
from ..models import TrafficIncident
from ..settings import get_api_user_agent
from ..taxonomy import determine_traffic_severity, normalize_traffic_type
from ..time_utils import parse_published_datetime, utc_now_iso
from .base import FETCH_ERRORS

logger = logging.getLogger(__name__)

OVERPASS_URL = "https://overpass-api.de/api/interpreter"


def build_overpass_query(region: RegionConfig) -> str:
    bbox = region.bounds.overpass_bbox()
    return f"""
[out:json][timeout:25];
(
  way["construction"](bbox:{bbox});
  way["highway"="construction"](bbox:{bbox});
  way["highway"]["access"="no"](bbox:{bbox});
  way["barrier"](bbox:{bbox});
  way["highway"]["barrier"](bbox:{bbox});
  way["hazard"](bbox:{bbox});
  way["natural"="hazard"](bbox:{bbox});
);
out center;
""".strip()


def _classify_tags(tags: dict[str, Any]) -> tuple[str, str]:
    if tags.get("construction") or tags.get("highway") == "construction":
        if tags.get("construction"):
            return "construction", f"Construction: {tags['construction']}"
        return "construction", tags.get("name") or "Road construction"
    if tags.get("access") == "no" or tags.get("barrier"):
        if tags.get("barrier"):
            return "closure", f"Road closure: {tags['barrier']}"
        return "closure", tags.get("name") or "Road closed"
    if tags.get("hazard") or tags.get("natural") == "hazard":
        if tags.get("hazard"):
            return "hazard", f"Hazard: {tags['hazard']}"
        return "hazard", tags.get("name") or "Road hazard"
    name = tags.get("name") or tags.get("ref") or ""
    return normalize_traffic_type(name), name or "Traffic incident"


def element_to_incident(element: dict[str, Any], region: RegionConfig) -> TrafficIncident | None:
    if element.get("type") != "way" or not element.get("center"):
        return None
    center = element["center"]
    lat = float(center["lat"])
    lng = float(center["lon"])
    if not region.bounds.contains(lat, lng):
        return None

    tags = element.get("tags")
    if not isinstance(tags, dict):
        tags = {}
    incident_type, description = _classify_tags(tags)
    modified = parse_published_datetime(element.get("timestamp"))
    timestamp = modified.isoformat().replace("+00:00", "Z") if modified else utc_now_iso()
    return TrafficIncident(
        id=f"osm-{element['type']}-{element.get('id')}",
        type=incident_type,
        description=description,
        lat=lat,
        lng=lng,
        severity=determine_traffic_severity(incident_type),
        timestamp=timestamp,
        source="OpenStreetMap",
    )


@dataclass
class TrafficConnector:
    client: httpx.AsyncClient
    region: RegionConfig | None = None
    base_url: str = OVERPASS_URL

    async def fetch(self) -> List[TrafficIncident]:
        cfg = self.region or RegionConfig()
        try:
            response = await self.client.post(
                self.base_url,
                data={"data": build_overpass_query(cfg)},
                headers={"User-Agent": get_api_user_agent()},
            )
            response.raise_for_status()
            payload = response.json()
        except FETCH_ERRORS as exc:
            logger.warning("Overpass fetch failed: %s", exc)
            return []

        elements = payload.get("elements") if isinstance(payload, dict) else None
        if not isinstance(elements, list):
            return []

        incidents: List[TrafficIncident] = []
        for element in elements:
            if not isinstance(element, dict):
                continue
            try:
                incident = element_to_incident(element, cfg)
            except (KeyError, TypeError, ValueError) as exc:
                logger.debug("Skipping malformed Overpass element: %s", exc)
                continue
            if incident is not None:
                incidents.append(incident)
        return incidents
