"""Pydantic models for scraped articles, incidents and map overlays."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

IncidentCategory = Literal["crime", "accident", "boating", "fire", "advisory", "other"]
IncidentSeverity = Literal["info", "advisory", "alert"]
TrafficType = Literal["accident", "closure", "construction", "disabled", "hazard", "other"]
WeatherSeverity = Literal["Minor", "Moderate", "Severe", "Extreme", "Unknown"]
LocationType = Literal["restaurant", "marina", "bar"]


class WireModel(BaseModel):
    """Base for models that travel as camelCase JSON."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class RawArticle(WireModel):
    id: str
    title: str
    summary: str
    url: str
    published_at: str = Field(alias="publishedAt")


class NormalizedIncident(WireModel):
    id: str
    title: str
    type: IncidentCategory
    severity: IncidentSeverity
    source: str
    source_url: str | None = Field(default=None, alias="sourceUrl")
    timestamp: str
    lat: float | None = None
    lng: float | None = None
    summary: str | None = None


class TopStory(WireModel):
    id: str
    headline: str
    summary: str
    source: str
    source_url: str | None = Field(default=None, alias="sourceUrl")
    timestamp: str


class WeatherAlert(WireModel):
    id: str = ""
    event: str = "Unknown"
    severity: WeatherSeverity = "Unknown"
    headline: str = "Weather Alert"
    description: str = ""
    area_desc: str = Field(default="", alias="areaDesc")
    effective: str = ""
    expires: str = ""


class TrafficIncident(WireModel):
    id: str
    type: TrafficType
    description: str
    lat: float
    lng: float
    severity: IncidentSeverity
    timestamp: str
    source: str = "OpenStreetMap"


class Location(WireModel):
    id: str
    name: str
    type: LocationType
    lat: float
    lng: float
    cam_embed_url: str | None = Field(default=None, alias="camEmbedUrl")
    is_open: bool | None = Field(default=None, alias="isOpen")


class LakeStatus(BaseModel):
    model_config = ConfigDict(extra="ignore")

    lakeLevel: float | None = None
    waterTemp: float | None = None
    riverLevel: float | None = None
    lastUpdated: str
    error: str | None = None

    def to_wire(self) -> dict:
        payload = self.model_dump(mode="json")
        if payload.get("error") is None:
            payload.pop("error", None)
        return payload
