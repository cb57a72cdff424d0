"""NOAA active weather alerts connector."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

import httpx
from pydantic import ValidationError

from ..config import RegionConfig
from ..models import WeatherAlert
from ..settings import get_api_user_agent
from .base import FETCH_ERRORS, fetch_json

logger = logging.getLogger(__name__)

NOAA_ALERTS_URL = "https://api.weather.gov/alerts/active"
_KNOWN_SEVERITIES = {"Minor", "Moderate", "Severe", "Extreme", "Unknown"}


def feature_to_alert(feature: dict) -> WeatherAlert | None:
    props = feature.get("properties") if isinstance(feature, dict) else None
    if not isinstance(props, dict) or props.get("status") != "Actual":
        return None
    event = props.get("event") or "Unknown"
    severity = props.get("severity") or "Unknown"
    return WeatherAlert(
        id=props.get("id") or "",
        event=event,
        severity=severity if severity in _KNOWN_SEVERITIES else "Unknown",
        headline=props.get("headline") or props.get("event") or "Weather Alert",
        description=props.get("description") or "",
        area_desc=props.get("areaDesc") or "",
        effective=props.get("effective") or "",
        expires=props.get("expires") or "",
    )


@dataclass
class WeatherAlertsConnector:
    client: httpx.AsyncClient
    region: RegionConfig | None = None
    base_url: str = NOAA_ALERTS_URL

    async def fetch(self) -> List[WeatherAlert]:
        cfg = self.region or RegionConfig()
        try:
            payload = await fetch_json(
                self.client,
                self.base_url,
                params={"point": f"{cfg.weather_point_lat},{cfg.weather_point_lng}"},
                headers={"User-Agent": get_api_user_agent(), "Accept": "application/geo+json"},
            )
        except FETCH_ERRORS as exc:
            logger.warning("NOAA alerts fetch failed: %s", exc)
            return []

        features = payload.get("features") if isinstance(payload, dict) else None
        if not isinstance(features, list):
            return []

        alerts: List[WeatherAlert] = []
        for feature in features:
            try:
                alert = feature_to_alert(feature)
            except ValidationError as exc:
                logger.debug("Skipping malformed alert feature: %s", exc)
                continue
            if alert is not None:
                alerts.append(alert)
        return alerts
