"""Environment and runtime settings."""

from __future__ import annotations

import os

from dotenv import load_dotenv

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


def load_environment() -> None:
    load_dotenv(override=False)


def is_development() -> bool:
    return os.getenv("LAKEWATCH_ENV", "").strip().lower() == "development"


def get_supabase_url() -> str:
    return os.getenv("SUPABASE_URL", "").strip()


def get_supabase_anon_key() -> str:
    return os.getenv("SUPABASE_ANON_KEY", "").strip()


def get_user_agent() -> str:
    return os.getenv("LAKEWATCH_USER_AGENT", "").strip() or DEFAULT_USER_AGENT


def get_api_user_agent() -> str:
    return os.getenv("LAKEWATCH_API_USER_AGENT", "").strip() or "loz.watch/1.0"


def get_http_timeout() -> float:
    raw = os.getenv("LAKEWATCH_HTTP_TIMEOUT", "").strip()
    if not raw:
        return 20.0
    try:
        return float(raw)
    except ValueError:
        return 20.0
