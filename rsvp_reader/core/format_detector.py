"""Decide whether normalized text is a speaker transcript or plain prose.

WHY: Transcripts must be segmented by speaker turn, prose by blank lines.
Pasted transcripts rarely keep their line structure, so the decision is
made from speaker-marker counts rather than layout.

HOW: Two independent pattern families from rsvp_reader.core.patterns:
  timestamped markers — "Jane Doe (01:23):" anywhere in the text
  speaker-only markers — "Jane Doe:" at the start of a line
A single timestamped marker is convincing on its own; untimed labels
need to repeat before they count.

RULES:
- Transcript if >= 1 timestamped marker
- Transcript if >= SPEAKER_ONLY_MIN_MARKERS speaker-only markers
- The threshold keeps one-off headings ("Chapter One:") from flipping
  ordinary prose into transcript mode; it is a heuristic, not a contract
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from rsvp_reader.core.patterns import SPEAKER_ONLY_MARKER_RE, TIMESTAMPED_MARKER_RE

logger = logging.getLogger(__name__)

# Untimed speaker labels needed before prose is treated as a transcript.
SPEAKER_ONLY_MIN_MARKERS = 3


@dataclass(frozen=True)
class FormatReport:
    """Marker counts and the resulting transcript decision."""

    timestamped_markers: int
    speaker_only_markers: int
    is_transcript: bool


def detect_format(text: str) -> FormatReport:
    """Count speaker markers in normalized text and classify it."""
    timestamped = sum(1 for _ in TIMESTAMPED_MARKER_RE.finditer(text))
    speaker_only = sum(1 for _ in SPEAKER_ONLY_MARKER_RE.finditer(text))
    report = FormatReport(
        timestamped_markers=timestamped,
        speaker_only_markers=speaker_only,
        is_transcript=timestamped > 0 or speaker_only >= SPEAKER_ONLY_MIN_MARKERS,
    )
    logger.debug(
        "Format detection: %d timestamped, %d speaker-only, transcript=%s",
        timestamped, speaker_only, report.is_transcript,
    )
    return report


def is_transcript(text: str) -> bool:
    return detect_format(text).is_transcript
