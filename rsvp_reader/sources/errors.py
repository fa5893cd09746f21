"""Typed failures for document sources.

WHY: A URL fetch can fail in several ways the user should be told apart:
no network, every proxy down, an HTTP error status, a page with no
readable text. The session, CLI and HTTP API each turn these into their
own messages and status codes.

HOW: A single SourceError carrying a SourceErrorCategory. Inherits from
Exception so callers can catch it without knowing the category.

RULES:
- message is a complete, user-facing sentence
- status_code is set only for HTTP category errors
"""

from __future__ import annotations

import enum
from typing import Optional


class SourceErrorCategory(str, enum.Enum):
    """Why a document source could not produce text."""

    NETWORK = "network"
    PROXY_EXHAUSTED = "proxy_exhausted"
    HTTP = "http"
    EMPTY = "empty"
    UNSUPPORTED = "unsupported"
    PARSE = "parse"
    INVALID_URL = "invalid_url"


class SourceError(Exception):
    """Raised when a URL, PDF or file cannot be turned into text."""

    def __init__(
        self,
        category: SourceErrorCategory,
        message: str,
        status_code: Optional[int] = None,
    ) -> None:
        self.category = category
        self.message = message
        self.status_code = status_code
        super().__init__(message)
