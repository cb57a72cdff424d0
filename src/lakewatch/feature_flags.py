"""Per-data-kind switches and HTML parser selection.

Flags come from ``config/feature_flags.json`` and are overridden by
``LAKEWATCH_FLAG_<NAME>`` environment variables. A value that cannot be
understood is logged and ignored, so the previous layer's value stands.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping

logger = logging.getLogger(__name__)

ENV_PREFIX = "LAKEWATCH_FLAG_"
HTML_PARSERS = ("regex", "soup")

# Data kind -> switch that gates it. Locations are always served.
KIND_SWITCHES: dict[str, str] = {
    "local_incidents": "local_incidents_enabled",
    "top_story": "top_story_enabled",
    "traffic": "traffic_enabled",
    "weather_alerts": "weather_alerts_enabled",
    "lake_status": "lake_status_enabled",
}

DEFAULT_FEATURE_FLAGS: dict[str, Any] = {
    **{switch: True for switch in KIND_SWITCHES.values()},
    "html_parser": "regex",
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def default_feature_flags_path() -> Path:
    return Path.cwd() / "config" / "feature_flags.json"


def _parse(key: str, value: Any) -> Any:
    """Parsed value for ``key``, or None when ``value`` is not usable."""
    if key == "html_parser":
        choice = str(value).strip().lower()
        return choice if choice in HTML_PARSERS else None
    if isinstance(value, bool):
        return value
    word = str(value).strip().lower()
    if word in _TRUE:
        return True
    if word in _FALSE:
        return False
    return None


def _apply(flags: dict[str, Any], updates: Mapping[str, Any], origin: str) -> None:
    for key in DEFAULT_FEATURE_FLAGS:
        if key not in updates:
            continue
        parsed = _parse(key, updates[key])
        if parsed is None:
            logger.warning("Ignoring flag %s=%r from %s", key, updates[key], origin)
            continue
        flags[key] = parsed


def _read_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Unreadable feature flag file %s: %s", path, exc)
        return {}
    return payload if isinstance(payload, dict) else {}


def _read_env() -> dict[str, str]:
    found = {}
    for key in DEFAULT_FEATURE_FLAGS:
        raw = os.getenv(ENV_PREFIX + key.upper(), "").strip()
        if raw:
            found[key] = raw
    return found


def load_feature_flags(path: Path | None = None) -> dict[str, Any]:
    candidate = path or default_feature_flags_path()
    flags = dict(DEFAULT_FEATURE_FLAGS)
    _apply(flags, _read_file(candidate), str(candidate))
    _apply(flags, _read_env(), "environment")
    return flags


def kind_enabled(flags: Mapping[str, Any], kind: str) -> bool:
    switch = KIND_SWITCHES.get(kind)
    if switch is None:
        return True
    return bool(flags.get(switch, True))
