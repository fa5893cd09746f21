"""Build the SpeakerDirectory for a document.

WHY: Running text refers to speakers by short forms ("Jane", "Doe",
"Speaker 2"). The frame resolver merges "Jane Doe" into one frame only
if it knows the pair is a name.

HOW: Two passes feed SpeakerDirectory.insert_or_extend():
  1. every timestamped marker in the normalized text
  2. the leading speaker head of each segmented paragraph
For each name, register_speaker() derives the keys:
  - the full name
  - 2+ words: first, last, and "first last"
  - 1 word: the word itself
  - "Speaker N": "Speaker N" and the bare numeral "N"

RULES:
- Titles are never part of a name key
- Names are deduplicated before registration ("John John Smith" → "John Smith")
- Stop words never become keys
- Registering the same names twice leaves the directory unchanged
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from rsvp_reader.core.cleaning import dedupe_speaker_name
from rsvp_reader.core.ir import Paragraph, SpeakerDirectory
from rsvp_reader.core.patterns import (
    TIMESTAMPED_MARKER_RE,
    canonical_speaker_label,
    speaker_number,
)

logger = logging.getLogger(__name__)

STOP_WORDS = frozenset({
    "the", "a", "an", "if", "and", "or", "but", "to", "of", "in", "on",
    "for", "with", "at", "from", "by", "as", "this", "that", "these", "those",
})


def name_keys(name: str) -> List[str]:
    """Return the directory keys for a canonical speaker name."""
    number = speaker_number(name)
    if number is not None:
        return [canonical_speaker_label(name), number]

    words = name.split()
    if not words:
        return []
    if len(words) == 1:
        keys = [words[0]]
    else:
        first, last = words[0], words[-1]
        keys = [name, first, last, f"{first} {last}"]
    return [key for key in keys if key.casefold() not in STOP_WORDS]


def register_speaker(directory: SpeakerDirectory, raw_name: str) -> Optional[str]:
    """Register every key of raw_name; return the canonical name used."""
    canonical = canonical_speaker_label(dedupe_speaker_name(raw_name))
    if not canonical:
        return None
    for key in name_keys(canonical):
        directory.insert_or_extend(key, canonical)
    return canonical


def build_directory(
    text: str,
    paragraphs: Iterable[Paragraph] = (),
    directory: Optional[SpeakerDirectory] = None,
) -> SpeakerDirectory:
    """Build (or extend) a directory from normalized text and its paragraphs."""
    if directory is None:
        directory = SpeakerDirectory()

    for match in TIMESTAMPED_MARKER_RE.finditer(text):
        register_speaker(directory, match.group("name"))

    for paragraph in paragraphs:
        if paragraph.speaker:
            register_speaker(directory, paragraph.speaker)

    logger.debug("Speaker directory: %d keys, speakers=%s", len(directory), directory.canonical_names())
    return directory
