"""Read-only JSON API re-exposing scrapers and overlays for the map client.

Every route answers 200 with an empty or null payload when something goes
wrong upstream; failures are logged, never returned to the caller.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Awaitable, Callable, Dict, Tuple
from urllib.parse import urlparse

import httpx

from .cache import TTLCache
from .connectors import build_client
from .connectors.lake_status import unavailable_status
from .service import IntelligenceService

logger = logging.getLogger(__name__)

HALF_HOUR = 30 * 60
ONE_HOUR = 60 * 60
FIVE_MINUTES = 5 * 60

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
}


def _wire_list(items: list) -> list[dict]:
    return [item.to_wire() for item in items]


@dataclass
class Route:
    ttl_seconds: int
    load: Callable[[IntelligenceService], Awaitable[Any]]
    render: Callable[[Any], Any]
    fallback: Callable[[], Any]

    def cacheable(self, payload: Any) -> bool:
        if not isinstance(payload, dict):
            return False
        if payload.get("error"):
            return False
        return any(value not in (None, [], {}) for value in payload.values())


ROUTES: Dict[str, Route] = {
    "/api/lake-expo-news": Route(
        HALF_HOUR,
        lambda s: s.lake_expo_articles(),
        lambda items: {"articles": _wire_list(items)},
        lambda: {"articles": []},
    ),
    "/api/city-announcements": Route(
        HALF_HOUR,
        lambda s: s.city_announcements(),
        lambda items: {"announcements": _wire_list(items)},
        lambda: {"announcements": []},
    ),
    "/api/lake-status": Route(
        ONE_HOUR,
        lambda s: s.lake_status(),
        lambda status: status.to_wire(),
        lambda: unavailable_status().to_wire(),
    ),
    "/api/local-incidents": Route(
        HALF_HOUR,
        lambda s: s.local_incidents(),
        lambda items: {"incidents": _wire_list(items)},
        lambda: {"incidents": []},
    ),
    "/api/top-story": Route(
        HALF_HOUR,
        lambda s: s.top_story(),
        lambda story: {"story": story.to_wire() if story else None},
        lambda: {"story": None},
    ),
    "/api/weather-alerts": Route(
        FIVE_MINUTES,
        lambda s: s.weather_alerts(),
        lambda items: {"alerts": _wire_list(items)},
        lambda: {"alerts": []},
    ),
    "/api/traffic-incidents": Route(
        FIVE_MINUTES,
        lambda s: s.traffic_incidents(),
        lambda items: {"incidents": _wire_list(items)},
        lambda: {"incidents": []},
    ),
    "/api/locations": Route(
        FIVE_MINUTES,
        lambda s: s.locations(),
        lambda items: {"locations": _wire_list(items)},
        lambda: {"locations": []},
    ),
}


class LakewatchApi:
    def __init__(
        self,
        service_factory: Callable[[httpx.AsyncClient], IntelligenceService] | None = None,
        client_factory: Callable[[], httpx.AsyncClient] = build_client,
        cache: TTLCache | None = None,
    ) -> None:
        self.service_factory = service_factory or (lambda client: IntelligenceService(client=client))
        self.client_factory = client_factory
        self.cache = cache or TTLCache()

    async def _load(self, route: Route) -> Any:
        async with self.client_factory() as client:
            service = self.service_factory(client)
            return route.render(await route.load(service))

    def handle_get(self, path: str) -> Tuple[int, Any]:
        if path == "/healthz":
            return HTTPStatus.OK, {"status": "ok"}
        route = ROUTES.get(path)
        if route is None:
            return HTTPStatus.NOT_FOUND, {"error": "not found"}

        cached = self.cache.get(path)
        if cached is not None:
            return HTTPStatus.OK, cached

        try:
            payload = asyncio.run(self._load(route))
        except Exception:
            logger.exception("Unhandled error serving %s", path)
            return HTTPStatus.OK, route.fallback()

        if route.cacheable(payload):
            self.cache.set(path, payload, route.ttl_seconds)
        return HTTPStatus.OK, payload


def make_handler(api: LakewatchApi) -> type[BaseHTTPRequestHandler]:
    class LakewatchHandler(BaseHTTPRequestHandler):
        server_version = "Lakewatch/1.0"

        def _send_json(self, payload: Any, status: int = 200, extra_headers: dict[str, str] | None = None) -> None:
            body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
            self.send_response(status)
            self.send_header("Content-Type", "application/json; charset=utf-8")
            self.send_header("Content-Length", str(len(body)))
            for key, value in {**SECURITY_HEADERS, **(extra_headers or {})}.items():
                self.send_header(key, value)
            self.end_headers()
            if self.command != "HEAD":
                self.wfile.write(body)

        def do_GET(self) -> None:  # noqa: N802
            path = urlparse(self.path).path
            status, payload = api.handle_get(path)
            route = ROUTES.get(path)
            headers = {"Cache-Control": f"public, max-age={route.ttl_seconds}"} if route else None
            self._send_json(payload, status=status, extra_headers=headers)

        def _method_not_allowed(self) -> None:
            self._send_json({"error": "method not allowed"}, status=HTTPStatus.METHOD_NOT_ALLOWED, extra_headers={"Allow": "GET"})

        do_POST = _method_not_allowed  # noqa: N815
        do_PUT = _method_not_allowed  # noqa: N815
        do_PATCH = _method_not_allowed  # noqa: N815
        do_DELETE = _method_not_allowed  # noqa: N815
        do_HEAD = _method_not_allowed  # noqa: N815
        do_OPTIONS = _method_not_allowed  # noqa: N815

        def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
            logger.info("%s - %s", self.address_string(), format % args)

    return LakewatchHandler


def serve(host: str = "127.0.0.1", port: int = 8787, api: LakewatchApi | None = None) -> None:
    server = ThreadingHTTPServer((host, port), make_handler(api or LakewatchApi()))
    print(json.dumps({"status": "listening", "host": host, "port": port}))
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
