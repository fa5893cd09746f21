"""Split one cleaned paragraph into display tokens.

WHY: The reader shows one token per frame. A speaker label such as
"Jane Doe (01:23):" must read as a single "Jane Doe:" frame, not as three
frames with a timestamp in the middle.

HOW: Curly quotes are straightened, then the paragraph is checked for a
leading speaker head. A head becomes at most two tokens:
  - the title, when present ("Dr.")
  - the deduplicated name with a trailing colon ("Jane Doe:")
Everything after the head is split on whitespace.

RULES:
- Timestamped heads are always recognised
- Untimed heads ("Jane Doe: …") only when untimed_heads is True
- Tokens are never empty and never carry surrounding whitespace
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from rsvp_reader.core.cleaning import dedupe_speaker_name
from rsvp_reader.core.patterns import (
    TIMESTAMPED_HEADER_RE,
    UNTIMED_HEADER_RE,
    canonical_speaker_label,
)

_QUOTES = str.maketrans({"“": '"', "”": '"', "‘": "'", "’": "'"})


@dataclass(frozen=True)
class SpeakerHead:
    """A parsed leading speaker label."""

    title: Optional[str]
    name: str
    body: str
    timestamped: bool

    @property
    def tokens(self) -> List[str]:
        head = [self.title] if self.title else []
        head.append(self.name + ":")
        return head


def straighten_quotes(text: str) -> str:
    return text.translate(_QUOTES)


def parse_head(text: str, untimed_heads: bool = True) -> Optional[SpeakerHead]:
    """Return the leading speaker head of text, or None."""
    match = TIMESTAMPED_HEADER_RE.match(text)
    timestamped = match is not None
    if match is None and untimed_heads:
        match = UNTIMED_HEADER_RE.match(text)
    if match is None:
        return None

    title = match.group("title")
    return SpeakerHead(
        title=title.strip() if title else None,
        name=canonical_speaker_label(dedupe_speaker_name(match.group("name"))),
        body=text[match.end():],
        timestamped=timestamped,
    )


def tokenize(text: str, untimed_heads: bool = True) -> List[str]:
    """Return the display tokens of a cleaned paragraph."""
    normalized = straighten_quotes(text or "").strip()
    head = parse_head(normalized, untimed_heads)
    if head is None:
        return normalized.split()
    return head.tokens + head.body.split()
