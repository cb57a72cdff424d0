"""Region and polling configuration schema using pydantic."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_POLL_INTERVALS: Dict[str, int] = {
    "lake_status": 5,
    "traffic": 10,
    "weather_alerts": 15,
    "local_intelligence": 15,
    "locations": 60,
}


class BoundingBox(BaseModel):
    south: float = 37.95
    north: float = 38.50
    west: float = -93.00
    east: float = -92.50

    @model_validator(mode="after")
    def validate_order(self) -> "BoundingBox":
        if self.south >= self.north:
            raise ValueError("south must be less than north")
        if self.west >= self.east:
            raise ValueError("west must be less than east")
        return self

    def contains(self, lat: float, lng: float) -> bool:
        return self.south <= lat <= self.north and self.west <= lng <= self.east

    def overpass_bbox(self) -> str:
        return f"{self.south},{self.west},{self.north},{self.east}"


class RegionConfig(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = "Lake of the Ozarks"
    center_lat: float = 38.15
    center_lng: float = -92.75
    spread_degrees: float = Field(default=0.25, gt=0, le=5)
    bounds: BoundingBox = Field(default_factory=BoundingBox)
    weather_point_lat: float = 38.1195
    weather_point_lng: float = -92.7714
    retention_days: int = Field(default=30, ge=1, le=3650)
    article_cap: int = Field(default=50, ge=1, le=500)
    announcement_cap: int = Field(default=30, ge=1, le=500)
    poll_intervals_minutes: Dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_POLL_INTERVALS))

    @model_validator(mode="after")
    def validate_intervals(self) -> "RegionConfig":
        merged = dict(DEFAULT_POLL_INTERVALS)
        for key, minutes in self.poll_intervals_minutes.items():
            if key not in DEFAULT_POLL_INTERVALS:
                raise ValueError(f"Unknown poll interval: {key}")
            if not 1 <= int(minutes) <= 1440:
                raise ValueError(f"Poll interval for {key} must be between 1 and 1440 minutes")
            merged[key] = int(minutes)
        self.poll_intervals_minutes = merged
        return self

    def interval_for(self, kind: str) -> int:
        return self.poll_intervals_minutes[kind]


def default_config_path() -> Path:
    return Path.cwd() / "config" / "region.json"


def load_region_config(path: Path | None = None) -> RegionConfig:
    file_path = path or default_config_path()
    if not file_path.exists():
        return RegionConfig()
    payload = json.loads(file_path.read_text(encoding="utf-8"))
    return RegionConfig.model_validate(payload)
