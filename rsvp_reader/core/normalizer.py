"""Canonicalize pasted text before any parsing.

WHY: The same transcript pasted from a browser, a PDF viewer and a chat
app differs in line endings, non-breaking spaces, zero-width joiners and
full-width punctuation. Every later stage assumes one canonical form.

HOW: A fixed, ordered list of replacements applied with str.replace and
one regex for the zero-width range.

RULES:
- "\\r\\n" and lone "\\r" become "\\n"
- NBSP (U+00A0) becomes an ordinary space
- Zero-width characters U+200B–U+200D and U+FEFF are removed
- Full-width "（", "）", "：" become "(", ")", ":"
- normalize() is total and idempotent
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlsplit

_ZERO_WIDTH_RE = re.compile("[\u200b-\u200d\ufeff]")

_REPLACEMENTS = (
    ("\r\n", "\n"),
    ("\r", "\n"),
    ("\u00a0", " "),
)

_FULL_WIDTH = str.maketrans({"\uff08": "(", "\uff09": ")", "\uff1a": ":"})

_ANGLE_WRAPPED_RE = re.compile(r"^<(.+)>$")


def normalize(raw: str) -> str:
    """Return the canonical form of raw pasted text."""
    text = raw or ""
    for old, new in _REPLACEMENTS:
        text = text.replace(old, new)
    text = _ZERO_WIDTH_RE.sub("", text)
    return text.translate(_FULL_WIDTH)


def parse_url_only_input(raw: str) -> Optional[str]:
    """Return the URL if the whole input is a single http(s) URL.

    WHY: Users paste a transcript page's address into the same box they
    paste transcripts into. A lone URL should be fetched, not read aloud.

    RULES:
    - Any interior whitespace means the input is text, not a URL
    - One pair of wrapping angle brackets ("<https://…>") is removed
    - Only http and https URLs with a host qualify
    """
    trimmed = normalize(raw).strip()
    if not trimmed or re.search(r"\s", trimmed):
        return None

    unwrapped = _ANGLE_WRAPPED_RE.sub(r"\1", trimmed).strip()
    try:
        parts = urlsplit(unwrapped)
    except ValueError:
        return None
    if parts.scheme.lower() not in ("http", "https") or not parts.netloc:
        return None
    return parts.geturl()
