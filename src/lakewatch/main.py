"""CLI entrypoint for serving the API, one-shot fetches and the watch loop."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Callable, List

from pydantic import ValidationError

from .api import LakewatchApi, serve
from .config import RegionConfig, load_region_config
from .connectors import build_client
from .database import SqlLocationStore, init_db
from .display import MapDisplay
from .feature_flags import load_feature_flags
from .service import IntelligenceService
from .settings import is_development, load_environment

logger = logging.getLogger(__name__)


def _configure_logging(level: str | None) -> None:
    resolved = level or ("DEBUG" if is_development() else "WARNING")
    logging.basicConfig(level=resolved.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _print(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _region(args: argparse.Namespace) -> RegionConfig:
    return load_region_config(Path(args.region_config) if args.region_config else None)


def _flags(args: argparse.Namespace) -> dict[str, Any]:
    return load_feature_flags(Path(args.flags) if args.flags else None)


def _service_factory(args: argparse.Namespace) -> Callable[..., IntelligenceService]:
    region = _region(args)
    flags = _flags(args)
    store = SqlLocationStore(Path(args.db)) if getattr(args, "db", None) else None

    def factory(client) -> IntelligenceService:
        return IntelligenceService(client=client, region=region, location_store=store, flags=flags)

    return factory


def _run_with_service(args: argparse.Namespace, call: Callable[[IntelligenceService], Any]) -> Any:
    factory = _service_factory(args)

    async def runner() -> Any:
        async with build_client() as client:
            return await call(factory(client))

    return asyncio.run(runner())


def _wire(items: list) -> list[dict]:
    return [item.to_wire() for item in items]


def cmd_serve(args: argparse.Namespace) -> int:
    api = LakewatchApi(service_factory=_service_factory(args))
    serve(host=args.host, port=args.port, api=api)
    return 0


def cmd_fetch_news(args: argparse.Namespace) -> int:
    articles = _run_with_service(args, lambda s: s.lake_expo_articles())
    _print({"articles": _wire(articles)})
    return 0


def cmd_fetch_announcements(args: argparse.Namespace) -> int:
    announcements = _run_with_service(args, lambda s: s.city_announcements())
    _print({"announcements": _wire(announcements)})
    return 0


def cmd_lake_status(args: argparse.Namespace) -> int:
    status = _run_with_service(args, lambda s: s.lake_status())
    _print(status.to_wire())
    return 0


def cmd_weather_alerts(args: argparse.Namespace) -> int:
    alerts = _run_with_service(args, lambda s: s.weather_alerts())
    _print({"alerts": _wire(alerts)})
    return 0


def cmd_traffic(args: argparse.Namespace) -> int:
    incidents = _run_with_service(args, lambda s: s.traffic_incidents())
    _print({"incidents": _wire(incidents)})
    return 0


def cmd_local_incidents(args: argparse.Namespace) -> int:
    incidents = _run_with_service(args, lambda s: s.local_incidents())
    _print({"incidents": _wire(incidents)})
    return 0


def cmd_top_story(args: argparse.Namespace) -> int:
    story = _run_with_service(args, lambda s: s.top_story())
    _print({"story": story.to_wire() if story else None})
    return 0


def cmd_locations(args: argparse.Namespace) -> int:
    locations = _run_with_service(args, lambda s: s.locations())
    _print({"locations": _wire(locations)})
    return 0


def cmd_init_db(args: argparse.Namespace) -> int:
    path = Path(args.db) if args.db else None
    inserted = init_db(path, seed=not args.no_seed)
    _print({"status": "ok", "inserted": inserted})
    return 0


def cmd_watch(args: argparse.Namespace) -> int:
    """Keep every overlay on its own refresh interval and print a snapshot after each refresh."""
    if args.cycles is not None and args.cycles <= 0:
        return 0
    region = _region(args)
    factory = _service_factory(args)

    async def runner() -> int:
        finished = asyncio.Event()
        printed = 0
        async with build_client() as client:
            display = MapDisplay(factory(client), region=region, embed_parent=args.parent)

            def emit(kind: str) -> None:
                nonlocal printed
                print(json.dumps({"refreshed": kind, **display.snapshot()}, ensure_ascii=False), flush=True)
                printed += 1
                if args.cycles is not None and printed >= args.cycles:
                    finished.set()

            display.on_refresh = emit
            try:
                await display.start()
                await finished.wait()
            finally:
                display.stop()
        return printed

    try:
        printed = asyncio.run(runner())
    except KeyboardInterrupt:
        return 0
    logger.debug("Watch printed %d snapshots", printed)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lakewatch")
    parser.add_argument("--log-level", default=None, help="Logging level (default WARNING, DEBUG in development)")
    parser.add_argument("--region-config", help="Path to region config JSON")
    parser.add_argument("--flags", help="Path to feature flags JSON")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the read-only JSON API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8787)
    serve_parser.add_argument("--db", help="Serve locations from a local SQLite file instead of Supabase")
    serve_parser.set_defaults(func=cmd_serve)

    simple_commands = [
        ("fetch-news", "Scrape Lake Expo news articles", cmd_fetch_news),
        ("fetch-announcements", "Scrape City of Lake Ozark announcements", cmd_fetch_announcements),
        ("lake-status", "Scrape lake level and water temperature", cmd_lake_status),
        ("weather-alerts", "Fetch active NWS alerts for the lake", cmd_weather_alerts),
        ("traffic", "Fetch road incidents from OpenStreetMap", cmd_traffic),
        ("local-incidents", "Build geocoded local incidents", cmd_local_incidents),
        ("top-story", "Pick the most recent local headline", cmd_top_story),
    ]
    for name, help_text, func in simple_commands:
        sub = subparsers.add_parser(name, help=help_text)
        sub.set_defaults(func=func)

    locations_parser = subparsers.add_parser("locations", help="List map locations")
    locations_parser.add_argument("--db", help="Read from a local SQLite file instead of Supabase")
    locations_parser.set_defaults(func=cmd_locations)

    init_parser = subparsers.add_parser("init-db", help="Create the local locations database")
    init_parser.add_argument("--db", help="SQLite file path (default ~/.lakewatch/locations.db)")
    init_parser.add_argument("--no-seed", action="store_true", help="Do not insert sample locations")
    init_parser.set_defaults(func=cmd_init_db)

    watch_parser = subparsers.add_parser("watch", help="Refresh each overlay on its own interval")
    watch_parser.add_argument("--cycles", type=int, default=None, help="Stop after N snapshots")
    watch_parser.add_argument("--db", help="Read locations from a local SQLite file instead of Supabase")
    watch_parser.add_argument("--parent", default="localhost", help="Hostname used for camera embed URLs")
    watch_parser.set_defaults(func=cmd_watch)

    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    load_environment()
    _configure_logging(args.log_level)
    try:
        return args.func(args)
    except ValidationError as exc:
        print(json.dumps({"status": "error", "message": f"Invalid configuration: {exc}"}))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
