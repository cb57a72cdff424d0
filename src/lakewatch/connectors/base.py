"""Shared HTTP helpers for page and API connectors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from ..settings import get_http_timeout, get_user_agent

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

# Everything a connector boundary turns into an empty result.
FETCH_ERRORS = (httpx.HTTPError, ValueError, KeyError, TypeError)


@dataclass
class PageSource:
    name: str
    url: str


def build_client(timeout: float | None = None, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=timeout if timeout is not None else get_http_timeout(),
        follow_redirects=True,
        transport=transport,
    )


def html_headers() -> dict[str, str]:
    return {"User-Agent": get_user_agent(), "Accept": HTML_ACCEPT}


async def fetch_text(client: httpx.AsyncClient, url: str, headers: dict[str, str] | None = None) -> str:
    response = await client.get(url, headers=headers or html_headers())
    response.raise_for_status()
    return response.text


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
) -> Any:
    response = await client.get(url, params=params, headers=headers)
    response.raise_for_status()
    return response.json()
