"""Read-only locations source backed by the hosted Supabase REST API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Protocol

import httpx

from ..models import Location
from .base import FETCH_ERRORS

logger = logging.getLogger(__name__)

LOCATIONS_TABLE = "locations"
LOCATIONS_LIMIT = 10000


class LocationStore(Protocol):
    async def list_locations(self) -> List[Location]:
        ...


def row_to_location(row: dict[str, Any]) -> Location:
    return Location(
        id=str(row["id"]),
        name=str(row["name"]),
        type=row["type"],
        lat=float(row["lat"]),
        lng=float(row["lng"]),
        cam_embed_url=row.get("cam_embed_url") or None,
        is_open=row.get("is_open"),
    )


@dataclass
class SupabaseLocationStore:
    client: httpx.AsyncClient
    base_url: str
    anon_key: str
    table: str = LOCATIONS_TABLE

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.anon_key)

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {self.anon_key}",
            "Accept": "application/json",
        }

    async def list_locations(self) -> List[Location]:
        if not self.configured:
            logger.warning("Supabase is not configured (SUPABASE_URL / SUPABASE_ANON_KEY); no locations loaded.")
            return []

        url = f"{self.base_url.rstrip('/')}/rest/v1/{self.table}"
        try:
            response = await self.client.get(
                url,
                params={"select": "*", "order": "name", "limit": str(LOCATIONS_LIMIT)},
                headers=self._headers(),
            )
            response.raise_for_status()
            rows = response.json()
        except FETCH_ERRORS as exc:
            logger.error("Error fetching locations from Supabase: %s", exc)
            return []

        if not isinstance(rows, list) or not rows:
            logger.warning("Supabase %s table returned no rows", self.table)
            return []

        locations: List[Location] = []
        for row in rows:
            try:
                locations.append(row_to_location(row))
            except (KeyError, TypeError, ValueError) as exc:
                logger.debug("Skipping malformed location row: %s", exc)
        logger.info("Loaded %d locations from Supabase", len(locations))
        return locations
