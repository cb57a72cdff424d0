"""Incident taxonomy: ordered keyword rules for categories and severities."""

from __future__ import annotations

from typing import Iterable, Sequence, Tuple

from .models import IncidentCategory, IncidentSeverity, TrafficIncident, TrafficType, WeatherAlert

# Evaluated top to bottom, first hit wins. "boat fire" is boating.
CATEGORY_RULES: Tuple[Tuple[IncidentCategory, Tuple[str, ...]], ...] = (
    ("boating", ("boat", "marine", "watercraft")),
    ("fire", ("fire", "blaze", "burn")),
    ("accident", ("accident", "crash", "collision")),
    ("crime", ("crime", "arrest", "theft", "police")),
    ("advisory", ("advisory", "warning", "alert")),
)

SERIOUS_KEYWORDS = ("fatal", "serious")

TRAFFIC_RULES: Tuple[Tuple[TrafficType, Tuple[str, ...]], ...] = (
    ("accident", ("accident", "crash", "collision")),
    ("closure", ("closure", "closed", "blocked")),
    ("construction", ("construction", "work", "maintenance")),
    ("disabled", ("disabled", "breakdown", "stalled")),
    ("hazard", ("hazard", "debris", "obstruction")),
)

TRAFFIC_TYPE_LABELS: dict[str, str] = {
    "accident": "Accident",
    "closure": "Road Closure",
    "construction": "Construction",
    "disabled": "Disabled Vehicle",
    "hazard": "Hazard",
    "other": "Incident",
}

SEVERITY_RANK = {"info": 0, "advisory": 1, "alert": 2}
ALERT_LEVEL_RANK = {"advisory": 0, "watch": 1, "warning": 2}


def _first_match(text: str, rules: Sequence[Tuple[str, Tuple[str, ...]]], default: str) -> str:
    for category, keywords in rules:
        if any(keyword in text for keyword in keywords):
            return category
    return default


def normalize_incident_type(type_hint: str, title: str, summary: str | None = None) -> IncidentCategory:
    text = f"{type_hint or ''} {title or ''} {summary or ''}".lower()
    return _first_match(text, CATEGORY_RULES, "other")  # type: ignore[return-value]


def _severity_is_alert(category: str, text: str) -> bool:
    if category == "fire":
        return True
    return category == "accident" and any(k in text for k in SERIOUS_KEYWORDS)


# Evaluated top to bottom: (predicate over category and lower-cased text, severity).
SEVERITY_RULES = (
    (_severity_is_alert, "alert"),
    (lambda category, _text: category in {"boating", "crime"}, "advisory"),
    (lambda category, _text: category in {"accident", "advisory"}, "advisory"),
)


def determine_incident_severity(
    category: IncidentCategory,
    title: str,
    summary: str | None = None,
) -> IncidentSeverity:
    text = f"{title or ''} {summary or ''}".lower()
    for predicate, severity in SEVERITY_RULES:
        if predicate(category, text):
            return severity  # type: ignore[return-value]
    return "info"


def normalize_traffic_type(value: str) -> TrafficType:
    return _first_match((value or "").lower(), TRAFFIC_RULES, "other")  # type: ignore[return-value]


def determine_traffic_severity(traffic_type: TrafficType) -> IncidentSeverity:
    if traffic_type in {"closure", "accident"}:
        return "alert"
    if traffic_type in {"construction", "hazard"}:
        return "advisory"
    return "info"


def format_traffic_type(traffic_type: str) -> str:
    return TRAFFIC_TYPE_LABELS.get(traffic_type, "Incident")


def highest_incident_severity(incidents: Iterable[TrafficIncident]) -> IncidentSeverity | None:
    best: IncidentSeverity | None = None
    for incident in incidents:
        if best is None or SEVERITY_RANK[incident.severity] > SEVERITY_RANK[best]:
            best = incident.severity
    return best


def alert_level(event: str, severity: str) -> str | None:
    event_lower = (event or "").lower()
    severity_lower = (severity or "").lower()
    if "warning" in event_lower or severity_lower in {"extreme", "severe"}:
        return "warning"
    if "watch" in event_lower or severity_lower == "moderate":
        return "watch"
    if "advisory" in event_lower or severity_lower == "minor":
        return "advisory"
    return None


def highest_alert_level(alerts: Iterable[WeatherAlert]) -> str | None:
    best: str | None = None
    for alert in alerts:
        level = alert_level(alert.event, alert.severity)
        if level is None:
            continue
        if best is None or ALERT_LEVEL_RANK[level] > ALERT_LEVEL_RANK[best]:
            best = level
    return best


def short_alert_name(alert: WeatherAlert) -> str:
    event = alert.event
    for suffix in (" Warning", " Watch", " Advisory"):
        if event.lower().endswith(suffix.lower()):
            cleaned = event[: -len(suffix)].rstrip()
            return cleaned or event
    return event
