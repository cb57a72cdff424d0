"""Datetime parsing and formatting helpers for scraped timestamps."""

from __future__ import annotations

from datetime import UTC, datetime
from email.utils import parsedate_to_datetime


def utc_now() -> datetime:
    return datetime.now(UTC)


def utc_now_iso() -> str:
    return utc_now().isoformat().replace("+00:00", "Z")


def parse_published_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    raw = str(value).strip()
    if not raw:
        return None
    try:
        dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return dt.astimezone(UTC)
    except ValueError:
        pass
    # Listing pages print US dates such as 3/7/2026.
    try:
        return datetime.strptime(raw, "%m/%d/%Y").replace(tzinfo=UTC)
    except ValueError:
        pass
    try:
        dt = parsedate_to_datetime(raw)
    except (TypeError, ValueError, IndexError):
        return None
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def sort_key(value: str | None) -> float:
    """Epoch seconds for newest-first sorting; unparseable values sort last."""
    dt = parse_published_datetime(value)
    if dt is None:
        return float("-inf")
    return dt.timestamp()


def format_time_since(timestamp: str | None, now: datetime | None = None) -> str:
    dt = parse_published_datetime(timestamp)
    if dt is None:
        return "Unknown time"
    current = now or utc_now()
    diff_mins = int((current - dt).total_seconds() // 60)
    diff_hours = diff_mins // 60
    diff_days = diff_hours // 24

    if diff_mins < 1:
        return "Just now"
    if diff_mins < 60:
        return f"{diff_mins} min ago"
    if diff_hours < 24:
        return f"{diff_hours} hour{'s' if diff_hours != 1 else ''} ago"
    if diff_days < 3:
        return f"{diff_days} day{'s' if diff_days != 1 else ''} ago"
    return f"{dt.month}/{dt.day}/{dt.year}"


def to_iso(value: str | None) -> str | None:
    """ISO-8601 UTC form of a parseable timestamp; anything else is returned unchanged."""
    dt = parse_published_datetime(value)
    if dt is None:
        return value
    return dt.isoformat().replace("+00:00", "Z")
