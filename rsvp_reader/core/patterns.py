"""Shared speaker-marker vocabulary and compiled regular expressions.

WHY: Format detection, segmentation, the speaker directory, the tokenizer
and document cleanup all recognise the same "Name (mm:ss):" speaker
markers. Defining the building blocks once keeps the stages in agreement
about what a speaker marker is.

HOW: Plain string fragments (TITLE, NAME, TIMESTAMP) are composed into a
small set of compiled patterns. Named groups "title" and "name" are used
wherever callers need to pull the parts apart.

RULES:
- Patterns are case-sensitive: with re.IGNORECASE "[A-Z][a-z]+" would
  match ordinary lowercase words such as "the" or "if"
- NAME tries "Speaker N" before capitalised words so the number is kept
- A title is optional, may end with ".", and is always followed by space
- Timestamps are (m:ss), (mm:ss) or (mm:ss:ss)
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

TITLE_WORDS: Tuple[str, ...] = (
    "Mr", "Mrs", "Ms", "Miss", "Dr", "Prof", "Professor",
    "Governor", "Mayor", "Senator", "Representative", "Congressman", "Congresswoman",
    "King", "Queen", "Prince", "Princess", "Duke", "Duchess", "Sir", "Madam", "Madame",
    "Lord", "Lady", "President", "Vice President", "Secretary", "General", "Admiral",
    "Colonel", "Major", "Captain", "Lieutenant", "Sergeant", "Chief", "Judge", "Justice",
    "Ambassador", "Minister", "Chancellor", "Premier", "Prime Minister",
)

# Longest first so "Mrs" is tried before "Mr" and "Vice President" before "President".
_TITLE_ALTERNATION = "|".join(
    title.replace(" ", r"[ \t]+")
    for title in sorted(TITLE_WORDS, key=len, reverse=True)
)

# Name words are joined by spaces or tabs only, never by a line break.
TITLE = rf"(?:{_TITLE_ALTERNATION})\.?[ \t]+"
NAME = r"[Ss]peaker[ \t]+[0-9]+|[A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+){0,3}"
TIMESTAMP = r"\([0-9]{1,2}:[0-9]{2}(?::[0-9]{2})?\)"

_TITLED_NAME = rf"(?P<title>{TITLE})?(?P<name>{NAME})"

# "Jane Doe (01:23): " anywhere in the text.
TIMESTAMPED_MARKER_RE = re.compile(
    rf"{_TITLED_NAME}\s+{TIMESTAMP}\s*:\s*"
)

# "Jane Doe: " at the start of a line (no timestamp).
SPEAKER_ONLY_MARKER_RE = re.compile(
    rf"^[ \t]*{_TITLED_NAME}[ \t]*:",
    re.MULTILINE,
)

# Paragraph-leading headers, with and without a timestamp.
TIMESTAMPED_HEADER_RE = re.compile(
    rf"^{_TITLED_NAME}\s+{TIMESTAMP}\s*:\s*"
)
UNTIMED_HEADER_RE = re.compile(
    rf"^{_TITLED_NAME}\s*:\s*"
)

# A bare timestamp that does not introduce a speaker turn.
ORPHAN_TIMESTAMP_RE = re.compile(rf"{TIMESTAMP}(?!\s*:)\s*")

# Any "(mm:ss):" — enough to mark a line as transcript content.
TIMESTAMP_COLON_RE = re.compile(rf"{TIMESTAMP}\s*:")

_SPEAKER_NUMBER_RE = re.compile(r"^[Ss]peaker\s+([0-9]+)$")
_TITLE_LOOKUP = frozenset(" ".join(title.lower().split()) for title in TITLE_WORDS)


def is_title_word(word: str) -> bool:
    """Return True if word (dots ignored, any case) is a title like "Dr."."""
    if not word:
        return False
    normalized = " ".join(word.replace(".", "").split()).lower()
    return normalized in _TITLE_LOOKUP


def speaker_number(name: str) -> Optional[str]:
    """Return "3" for "Speaker 3" / "speaker  3", else None."""
    match = _SPEAKER_NUMBER_RE.match(name.strip())
    return match.group(1) if match else None


def canonical_speaker_label(name: str) -> str:
    """Normalise "speaker  3" to "Speaker 3"; other names pass through."""
    number = speaker_number(name)
    if number is not None:
        return f"Speaker {number}"
    return " ".join(name.split())
