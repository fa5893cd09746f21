"""Configuration defaults and .env loading.

WHY: Reading speed, paragraph behaviour, network timeouts and the proxy
chain used for URL fetches are deployment choices, not code. Keeping
them in one module makes them easy to find and override.

HOW: python-dotenv loads the .env file on import. Defaults are read from
the environment into module-level constants. The load_*() helpers
re-read the environment and validate, raising ValueError with a clear
message on bad values.

RULES:
- RSVP_DEFAULT_WPM: positive integer, default 350
- RSVP_AUTO_CONTINUE: "true"/"false", default true
- RSVP_FETCH_TIMEOUT_S: positive number of seconds, default 20
- RSVP_PROXY_URLS: comma-separated URL templates containing "{url}"
- RSVP_DOCUMENT_TTL_S: seconds an API document lives, default 3600
- RSVP_LOG_LEVEL: logging level name, default INFO
"""

from __future__ import annotations

import logging
import os
from typing import List

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Reader defaults
# ---------------------------------------------------------------------------

DEFAULT_WPM = 350
DEFAULT_AUTO_CONTINUE = True

# ---------------------------------------------------------------------------
# Document sources
# ---------------------------------------------------------------------------

DEFAULT_FETCH_TIMEOUT_S = 20.0

DEFAULT_PROXY_URLS: List[str] = [
    "https://api.allorigins.win/raw?url={url}",
    "https://corsproxy.io/?{url}",
    "https://api.codetabs.com/v1/proxy?quest={url}",
]
"""Fallback chain tried in order when a direct fetch fails at the transport level."""

BROWSER_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

PDF_EXTENSIONS = {".pdf"}
TEXT_EXTENSIONS = {".txt", ".text", ".md", ".srt", ".vtt", ".html", ".htm"}

# ---------------------------------------------------------------------------
# HTTP API
# ---------------------------------------------------------------------------

DEFAULT_DOCUMENT_TTL_S = 3600
DEFAULT_HOST = os.getenv("RSVP_HOST", "127.0.0.1")
DEFAULT_PORT = int(os.getenv("RSVP_PORT", "8000"))


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be true or false, got {value!r}")


def load_wpm() -> int:
    """Read RSVP_DEFAULT_WPM; raise ValueError unless it is a positive integer."""
    raw = os.getenv("RSVP_DEFAULT_WPM", str(DEFAULT_WPM)).strip()
    try:
        wpm = int(raw)
    except ValueError:
        raise ValueError(f"RSVP_DEFAULT_WPM must be an integer, got {raw!r}") from None
    if wpm <= 0:
        raise ValueError(f"RSVP_DEFAULT_WPM must be positive, got {wpm}")
    return wpm


def load_auto_continue() -> bool:
    raw = os.getenv("RSVP_AUTO_CONTINUE")
    if raw is None or not raw.strip():
        return DEFAULT_AUTO_CONTINUE
    return _parse_bool("RSVP_AUTO_CONTINUE", raw)


def load_fetch_timeout() -> float:
    raw = os.getenv("RSVP_FETCH_TIMEOUT_S", str(DEFAULT_FETCH_TIMEOUT_S)).strip()
    try:
        timeout = float(raw)
    except ValueError:
        raise ValueError(f"RSVP_FETCH_TIMEOUT_S must be a number, got {raw!r}") from None
    if timeout <= 0:
        raise ValueError(f"RSVP_FETCH_TIMEOUT_S must be positive, got {timeout}")
    return timeout


def load_proxy_urls() -> List[str]:
    """Read RSVP_PROXY_URLS; an empty value disables proxy fallback.

    Every template must contain "{url}", where the encoded target goes.
    """
    raw = os.getenv("RSVP_PROXY_URLS")
    if raw is None:
        return list(DEFAULT_PROXY_URLS)
    templates = [item.strip() for item in raw.split(",") if item.strip()]
    for template in templates:
        if "{url}" not in template:
            raise ValueError(f"RSVP_PROXY_URLS entry has no {{url}} placeholder: {template!r}")
    return templates


def load_document_ttl() -> int:
    raw = os.getenv("RSVP_DOCUMENT_TTL_S", str(DEFAULT_DOCUMENT_TTL_S)).strip()
    try:
        ttl = int(raw)
    except ValueError:
        raise ValueError(f"RSVP_DOCUMENT_TTL_S must be an integer, got {raw!r}") from None
    if ttl <= 0:
        raise ValueError(f"RSVP_DOCUMENT_TTL_S must be positive, got {ttl}")
    return ttl


def load_log_level() -> int:
    name = os.getenv("RSVP_LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ValueError(f"RSVP_LOG_LEVEL is not a logging level: {name!r}")
    return level
