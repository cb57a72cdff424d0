"""Place-name gazetteer and deterministic fallback placement for the lake region.

Items are placed by the first matching place keyword. Text with no known
place gets a pseudo-random but stable offset around the region center,
derived from the code-point sum of the item identifier.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

from .config import RegionConfig

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlaceEntry:
    keywords: Tuple[str, ...]
    lat: float
    lng: float


# Order matters: "osage beach" before county names, "miller county" before "miller".
PLACE_KEYWORDS: Tuple[PlaceEntry, ...] = (
    PlaceEntry(("camdenton",), 38.20, -92.75),
    PlaceEntry(("eldon",), 38.35, -92.58),
    PlaceEntry(("osage beach", "osage"), 38.13, -92.65),
    PlaceEntry(("sunrise beach",), 38.18, -92.78),
    PlaceEntry(("lake ozark", "bagnell"), 38.20, -92.63),
    PlaceEntry(("versailles",), 38.43, -92.84),
    PlaceEntry(("linn creek",), 38.03, -92.70),
    PlaceEntry(("gravois mills",), 38.20, -92.83),
    PlaceEntry(("laurie",), 38.20, -92.83),
    PlaceEntry(("four seasons",), 38.20, -92.70),
    PlaceEntry(("miller county", "miller"), 38.20, -92.60),
    PlaceEntry(("camden county", "camden"), 38.15, -92.75),
    PlaceEntry(("morgan county", "morgan"), 38.43, -92.84),
    PlaceEntry(("highway 54", "hwy 54", "hwy54"), 38.20, -92.75),
    PlaceEntry(("highway 5", "hwy 5", "hwy5"), 38.15, -92.70),
)

LAKE_OZARK_POINT = (38.20, -92.63)


def match_place(text: str) -> Tuple[float, float] | None:
    haystack = (text or "").lower()
    for entry in PLACE_KEYWORDS:
        if any(keyword in haystack for keyword in entry.keywords):
            return entry.lat, entry.lng
    return None


def identifier_hash(identifier: str) -> int:
    return sum(ord(ch) for ch in identifier or "")


def fallback_coordinates(identifier: str, region: RegionConfig | None = None) -> Tuple[float, float]:
    cfg = region or RegionConfig()
    value = identifier_hash(identifier)
    spread = cfg.spread_degrees
    lat_offset = ((value % 200) - 100) / 400 * spread
    lng_offset = (((value * 13) % 200) - 100) / 400 * spread
    return cfg.center_lat + lat_offset, cfg.center_lng + lng_offset


def geocode(text: str, identifier: str, region: RegionConfig | None = None) -> Tuple[float, float]:
    """Return coordinates for an item; never returns None."""
    matched = match_place(text)
    if matched is not None:
        return matched
    _log.debug("No place keyword for %s, using fallback placement", identifier)
    return fallback_coordinates(identifier, region)


def is_within_region(lat: float, lng: float, region: RegionConfig | None = None) -> bool:
    cfg = region or RegionConfig()
    return cfg.bounds.contains(lat, lng)
