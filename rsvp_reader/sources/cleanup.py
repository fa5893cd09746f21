"""Transcript-aware cleanup of text scraped from web pages.

WHY: A transcript page's text content is the transcript plus everything
around it. Splitting by speaker marker first, then dropping what the
junk filter rejects, keeps the speech and loses the page furniture.

HOW: split_transcript() from the segmenter does the marker split and the
continuation merge; each resulting paragraph is cleaned and filtered.

RULES:
- Paragraphs carrying a timestamped marker are always kept
- Other paragraphs are kept only if they are not junk and longer than
  MIN_PARAGRAPH_CHARS
"""

from __future__ import annotations

import logging
from typing import List

from rsvp_reader.core.cleaning import clean_paragraph
from rsvp_reader.core.junk_filter import classify, has_speaker_marker
from rsvp_reader.core.segmenter import split_transcript

logger = logging.getLogger(__name__)

MIN_PARAGRAPH_CHARS = 5


def split_transcript_by_speakers(text: str) -> List[str]:
    """Return cleaned speaker paragraphs of scraped page text."""
    paragraphs: List[str] = []
    for raw in split_transcript(text):
        cleaned = clean_paragraph(raw.text)
        if not cleaned:
            continue
        if has_speaker_marker(cleaned):
            paragraphs.append(cleaned)
            continue
        reason = classify(cleaned)
        if reason is not None:
            logger.debug("Dropped scraped paragraph (%s): %r", reason, cleaned[:80])
            continue
        if len(cleaned) > MIN_PARAGRAPH_CHARS:
            paragraphs.append(cleaned)

    logger.debug("Scraped transcript split into %d paragraphs", len(paragraphs))
    return paragraphs
