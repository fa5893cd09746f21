"""Clean segmented paragraphs before tokenization.

WHY: Transcripts copied from web pages drag along page furniture that
the junk filter cannot see line by line: after a paste collapses line
breaks, the footer menu is glued onto the last speaker turn. Speaker
labels also arrive garbled ("John John Smith Smith:") when a page
renders the name in two overlapping elements.

HOW: clean_paragraph() applies a fixed sequence of passes:
  1. remove "[inaudible …]" markers (surrounding text is kept)
  2. remove orphan timestamps — "(mm:ss)" not followed by ":"
  3. collapse whitespace
  4. decode HTML entities with html.unescape
  5. deduplicate the leading speaker label
  6. cut boilerplate tails using the ordered BOILERPLATE_TAILS table
  7. collapse whitespace and trim

RULES:
- Timestamps that introduce a speaker turn stay in the paragraph text
- Tail rules cut from the first match to the end of the paragraph
- Only the leading speaker label is deduplicated; running text is not
- Total: returns "" rather than raising
"""

from __future__ import annotations

import html
import logging
import re
from typing import List, Pattern, Tuple

from rsvp_reader.core.patterns import ORPHAN_TIMESTAMP_RE, TIMESTAMP, TITLE

logger = logging.getLogger(__name__)

_INAUDIBLE_RE = re.compile(r"\[inaudible[^\]]*\]", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")

# Any run of capitalised words or "Speaker N" groups followed by ":",
# without the four-word cap, so garbled labels like
# "Jane Doe Jane Doe Jane Doe:" are still recognised.
_NAME_UNIT = r"(?:[Ss]peaker[ \t]+[0-9]+|[A-Z][a-z]+)"
_LEADING_LABEL_RE = re.compile(
    rf"^(?P<title>{TITLE})?(?P<name>{_NAME_UNIT}(?:[ \t]+{_NAME_UNIT})*)"
    rf"(?P<timestamp>[ \t]*{TIMESTAMP})?[ \t]*:"
)


def _tail(name: str, pattern: str, flags: int = re.IGNORECASE) -> Tuple[str, Pattern[str]]:
    return name, re.compile(pattern + r".*$", flags | re.DOTALL)


# Evaluated top to bottom; each rule cuts from its match to the end.
BOILERPLATE_TAILS: Tuple[Tuple[str, Pattern[str]], ...] = (
    _tail("topics-empty", r"\bTopics?:\s*No\s+items\s+found"),
    _tail("hungry-for-more", r"\bHungry\s+For\s+More\?"),
    _tail("luckily-for-you", r"\bLuckily\s+for\s+you,\s+we\s+deliver"),
    _tail("subscribe-blog", r"\bSubscribe\s+to\s+(?:our|the\s+Rev)\s+blog"),
    _tail("subscribed", r"\bThank\s+You\s+for\s+Subscribing!"),
    _tail("confirmation-email", r"\bA\s+confirmation\s+email\s+(?:is|has|will)"),
    _tail("transcripts-home", r"\bTranscripts\s+Home\b"),
    _tail("read-transcript", r"\bRead\s+the\s+transcript\s+here\b"),
    _tail("help-center", r"\bHelp\s+Center\s+Developers\b"),
    _tail("contact-support", r"\bContact\s+Support\b"),
    _tail("human-verified", r"\bHuman-Verified\b"),
    _tail("platform-features", r"\bAI\s+Platform\s+Features\b"),
    _tail("premium-tools", r"\bPremium\s+Tools\b"),
    _tail("menu", r"\b(?:Product|Industries|Resources)\s+Back\s+to\s+menu\b"),
    _tail("blog-home", r"\bBlog\s+Home\b"),
    _tail("copyright", r"\bCopyright\s+Disclaimer\b"),
    _tail("title-17", r"\bUnder\s+Title\s+17\b"),
    _tail("fair-use", r"\bFair\s+use\s+is\s+a\s+use\s+permitted\b"),
    _tail("page-title", r"^.*\s\|\s+Rev\b"),
    # Case-sensitive; only a trailing run of capitalised tags.
    _tail("topics", r"\bTopics?:(?:\s+[A-Z][A-Za-z]*)*\s*$", flags=0),
)


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def dedupe_speaker_name(name: str) -> str:
    """Collapse immediately repeated words or phrases in a speaker name.

    "John John Smith Smith" → "John Smith"
    "Jane Doe Jane Doe"     → "Jane Doe"

    Comparison is case-insensitive; the first occurrence's casing is kept.
    Runs until no repeat is left.
    """
    words: List[str] = name.split()
    changed = True
    while changed:
        changed = False
        for size in range(1, len(words) // 2 + 1):
            i = 0
            while i + 2 * size <= len(words):
                first = [w.casefold() for w in words[i:i + size]]
                second = [w.casefold() for w in words[i + size:i + 2 * size]]
                if first == second:
                    del words[i + size:i + 2 * size]
                    changed = True
                else:
                    i += 1
    return " ".join(words)


def dedupe_speaker_label(text: str) -> str:
    """Deduplicate the name in a paragraph's leading speaker label.

    "John John Smith Smith (01:23): Hi" → "John Smith (01:23): Hi"
    """
    match = _LEADING_LABEL_RE.match(text)
    if match is None:
        return text

    name = match.group("name")
    deduped = dedupe_speaker_name(name)
    if deduped == name:
        return text

    logger.debug("Deduplicated speaker label %r -> %r", name, deduped)
    start, end = match.span("name")
    return text[:start] + deduped + text[end:]


def strip_boilerplate_tails(text: str) -> str:
    """Cut every boilerplate tail found in text."""
    for name, pattern in BOILERPLATE_TAILS:
        cut = pattern.sub("", text)
        if cut != text:
            logger.debug("Boilerplate rule %r removed %d chars", name, len(text) - len(cut))
            text = cut
    return text


def clean_paragraph(text: str) -> str:
    """Return the cleaned form of one segmented paragraph ("" if nothing is left)."""
    cleaned = (text or "").strip()
    cleaned = _INAUDIBLE_RE.sub(" ", cleaned)
    cleaned = ORPHAN_TIMESTAMP_RE.sub(" ", cleaned)
    cleaned = collapse_whitespace(cleaned)
    cleaned = html.unescape(cleaned)
    cleaned = dedupe_speaker_label(cleaned)
    cleaned = strip_boilerplate_tails(cleaned)
    return collapse_whitespace(cleaned)
