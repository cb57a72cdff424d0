"""Ameren lake reports scrape: lake level, surface water temperature, river level."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Sequence

import httpx

from ..models import LakeStatus
from ..settings import get_user_agent
from ..time_utils import utc_now_iso
from .base import FETCH_ERRORS, fetch_text

logger = logging.getLogger(__name__)

AMEREN_REPORTS_URL = "https://www.ameren.com/property/lake-of-the-ozarks/reports"
UNAVAILABLE_MESSAGE = "Unable to fetch lake status data"

LAKE_LEVEL_PATTERNS = (
    re.compile(r"Current\s+Lake\s+level\s+is\s*[|:]\s*(\d+\.?\d*)", re.IGNORECASE),
    re.compile(r"Lake\s+level[^|]*[|:]\s*(\d+\.?\d*)", re.IGNORECASE),
    re.compile(r"Current\s+Lake\s+level[^0-9]*(\d+\.?\d*)", re.IGNORECASE),
)
WATER_TEMP_PATTERNS = (
    re.compile(r"Surface\s+Water\s+Temp\s+is\s*[|:]\s*(\d+\.?\d*)", re.IGNORECASE),
    re.compile(r"Surface\s+Water\s+Temp[^|]*[|:]\s*(\d+\.?\d*)", re.IGNORECASE),
    re.compile(r"Water\s+Temp[^0-9]*(\d+\.?\d*)", re.IGNORECASE),
)
RIVER_LEVEL_PATTERNS = (
    re.compile(r"River\s+Level\s+is\s*[|:]\s*(\d+\.?\d*)", re.IGNORECASE),
    re.compile(r"River\s+Level[^|]*[|:]\s*(\d+\.?\d*)", re.IGNORECASE),
)

# Normal operating band in feet; 655 is the target level.
NORMAL_LAKE_LEVEL_MIN = 654.0
NORMAL_LAKE_LEVEL_MAX = 656.0


def first_number(text: str, patterns: Sequence[re.Pattern[str]]) -> float | None:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            try:
                return float(match.group(1))
            except ValueError:
                continue
    return None


def parse_lake_status(html: str) -> LakeStatus:
    return LakeStatus(
        lakeLevel=first_number(html, LAKE_LEVEL_PATTERNS),
        waterTemp=first_number(html, WATER_TEMP_PATTERNS),
        riverLevel=first_number(html, RIVER_LEVEL_PATTERNS),
        lastUpdated=utc_now_iso(),
    )


def unavailable_status() -> LakeStatus:
    return LakeStatus(lastUpdated=utc_now_iso(), error=UNAVAILABLE_MESSAGE)


def is_level_normal(level: float | None) -> bool | None:
    if level is None:
        return None
    return NORMAL_LAKE_LEVEL_MIN <= level <= NORMAL_LAKE_LEVEL_MAX


@dataclass
class LakeStatusConnector:
    client: httpx.AsyncClient
    url: str = AMEREN_REPORTS_URL

    async def fetch(self) -> LakeStatus:
        try:
            html = await fetch_text(self.client, self.url, headers={"User-Agent": get_user_agent()})
        except FETCH_ERRORS as exc:
            logger.warning("Lake status fetch failed: %s", exc)
            return unavailable_status()
        return parse_lake_status(html)
