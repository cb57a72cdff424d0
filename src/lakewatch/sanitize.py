"""Sanitizers for scraped text, markup and links.

Every function here is total: non-string or empty input yields an empty
string instead of raising.
"""

from __future__ import annotations

import html
import re
from typing import Any

_ESCAPE_MAP = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#039;",
}
_ESCAPE_RE = re.compile(r"[&<>\"']")
_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")
_ALLOWED_URL_RE = re.compile(r"^(https?://|/)", re.IGNORECASE)

BLOCKED_SCHEMES = ("javascript:", "data:", "vbscript:", "file:")
SAFE_URL_PLACEHOLDER = "#"


def escape_html(text: str) -> str:
    return _ESCAPE_RE.sub(lambda m: _ESCAPE_MAP[m.group(0)], text)


def sanitize_text(text: Any) -> str:
    if not text or not isinstance(text, str):
        return ""
    return escape_html(text.strip())


def sanitize_html(markup: Any) -> str:
    """Strip tags, decode entities, re-escape, and collapse whitespace."""
    if not markup or not isinstance(markup, str):
        return ""
    stripped = _TAG_RE.sub("", markup)
    decoded = html.unescape(stripped)
    escaped = escape_html(decoded)
    return _WHITESPACE_RE.sub(" ", escaped).strip()


def sanitize_url(url: Any) -> str:
    if not url or not isinstance(url, str):
        return ""
    trimmed = url.strip()
    lowered = trimmed.lower()
    if any(lowered.startswith(scheme) for scheme in BLOCKED_SCHEMES):
        return SAFE_URL_PLACEHOLDER
    if not _ALLOWED_URL_RE.match(trimmed):
        return SAFE_URL_PLACEHOLDER
    return trimmed


def truncate_text(text: Any, max_length: int) -> str:
    if not text or not isinstance(text, str):
        return ""
    if len(text) <= max_length:
        return text
    return text[: max(0, max_length)] + "..."
