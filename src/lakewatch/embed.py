"""Camera embed URL normalization."""

from __future__ import annotations

import logging
import re
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

_VIDEO_RE = re.compile(r"twitch\.tv/videos/(\d+)")
_CLIP_RE = re.compile(r"(?:clips\.twitch\.tv/|twitch\.tv/[^/]+/clip/)([a-zA-Z0-9_-]+)")
_CHANNEL_RE = re.compile(r"twitch\.tv/([a-zA-Z0-9_]+)(?:\?|/|$)")
_RESERVED_CHANNEL_NAMES = {"videos", "clip"}


def _with_params(url: str, **params: str) -> str:
    parts = urlsplit(url)
    query = dict(parse_qsl(parts.query, keep_blank_values=True))
    query.update(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


def _twitch_embed_url(url: str, parent: str) -> str:
    if "player.twitch.tv" in url:
        return _with_params(url, parent=parent, muted="false")
    if "clips.twitch.tv/embed" in url:
        return _with_params(url, parent=parent)

    match = _VIDEO_RE.search(url)
    if match:
        return f"https://player.twitch.tv/?video={match.group(1)}&parent={parent}&muted=false"

    match = _CLIP_RE.search(url)
    if match:
        return f"https://clips.twitch.tv/embed?clip={match.group(1)}&parent={parent}&muted=false"

    # channel last, so video and clip paths are not taken for channel names
    match = _CHANNEL_RE.search(url)
    if match and match.group(1) not in _RESERVED_CHANNEL_NAMES:
        return f"https://player.twitch.tv/?channel={match.group(1)}&parent={parent}&muted=false"

    logger.debug("Unrecognized Twitch URL left unchanged: %s", url)
    return url


def process_embed_url(url: str | None, parent: str = "localhost") -> str | None:
    """Rewrite Twitch channel, video and clip links into player embed URLs.

    Anything that is not a Twitch link (YouTube embeds included) is returned
    as given. ``parent`` must be the hostname serving the page.
    """
    if not url:
        return url
    if "twitch.tv" not in url:
        return url
    return _twitch_embed_url(url, parent)
