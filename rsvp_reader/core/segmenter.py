"""Split normalized text into cleaned, tokenized paragraphs.

WHY: Paragraphs are the unit of context display and of the optional
pause between paragraphs. For transcripts a paragraph must be one
speaker turn, even when the paste lost its line breaks or the page
repeats the speaker's marker every few sentences.

HOW: Two modes, chosen from the FormatReport:

  Transcript mode (at least one timestamped marker):
    - text before the first marker is split on blank lines and kept
      line by line unless the junk filter rejects it
    - each marker's segment runs to the next marker
    - a marker for the speaker already talking is a continuation: the
      marker is dropped, a leading ellipsis is stripped and the text is
      appended to the open paragraph

  Plain mode (no timestamped markers):
    - when the detector still calls the text a transcript (repeated
      untimed "Name:" lines), a blank line is first inserted before
      every line that opens with a speaker label
    - split on blank lines (lines holding only spaces count as blank)
    - recovery merge: a paragraph that starts with a speaker header opens
      a block that absorbs following paragraphs until the next header

Every produced paragraph is passed through clean_paragraph() and
tokenize(); paragraphs left without tokens are dropped.

RULES:
- Untimed speaker heads are tokenized only for transcript documents or
  paragraphs that opened a recovered speaker block
- Untimed headers only open recovery blocks when at least
  RECOVERY_MIN_HEADERS paragraphs carry one
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from rsvp_reader.core.cleaning import clean_paragraph, dedupe_speaker_name
from rsvp_reader.core.format_detector import FormatReport, detect_format
from rsvp_reader.core.ir import Paragraph
from rsvp_reader.core.junk_filter import classify
from rsvp_reader.core.patterns import (
    SPEAKER_ONLY_MARKER_RE,
    TIMESTAMPED_HEADER_RE,
    TIMESTAMPED_MARKER_RE,
    TITLE,
    canonical_speaker_label,
)
from rsvp_reader.core.tokenizer import parse_head, straighten_quotes, tokenize

logger = logging.getLogger(__name__)

# Untimed headers needed before the recovery merge trusts them.
RECOVERY_MIN_HEADERS = 3

_BLANK_LINES_RE = re.compile(r"\n(?:[ \t]*\n)+")
_LEADING_ELLIPSIS_RE = re.compile(r"^(?:…+|\.{3,})\s*")

# Two to four capitalised words, so one-word headings ("Summary:") never
# open a block.
_RECOVERY_HEADER_RE = re.compile(
    rf"^(?:{TITLE})?(?:[Ss]peaker[ \t]+[0-9]+|[A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+){{1,3}})\s*:\s*"
)


@dataclass(frozen=True)
class RawParagraph:
    """A paragraph before cleaning, plus whether it opened a speaker block."""

    text: str
    speaker_block: bool = False


# ---------------------------------------------------------------------------
# Transcript mode
# ---------------------------------------------------------------------------


def speaker_key(name: str) -> str:
    """The comparison key for a marker's name: deduplicated, case-folded."""
    return canonical_speaker_label(dedupe_speaker_name(name)).casefold()


def split_blank_lines(text: str) -> List[str]:
    return [piece.strip() for piece in _BLANK_LINES_RE.split(text) if piece.strip()]


def _filter_prelude(prelude: str) -> List[str]:
    kept: List[str] = []
    for piece in split_blank_lines(prelude):
        lines = []
        for line in piece.split("\n"):
            reason = classify(line)
            if reason is None:
                lines.append(line.strip())
            else:
                logger.debug("Dropped prelude line (%s): %r", reason, line.strip()[:80])
        joined = " ".join(line for line in lines if line)
        if joined:
            kept.append(joined)
    return kept


def split_transcript(text: str) -> List[RawParagraph]:
    """Split text on timestamped speaker markers, merging continuations."""
    matches = list(TIMESTAMPED_MARKER_RE.finditer(text))
    if not matches:
        return [RawParagraph(piece) for piece in split_blank_lines(text)]

    paragraphs = [RawParagraph(piece) for piece in _filter_prelude(text[:matches[0].start()])]

    current = ""
    active_key: Optional[str] = None
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        marker = match.group(0).strip()
        body = " ".join(text[match.end():end].split())
        key = speaker_key(match.group("name"))

        if active_key is not None and key == active_key:
            continuation = _LEADING_ELLIPSIS_RE.sub("", body).strip()
            if continuation:
                current = f"{current} {continuation}".strip()
            continue

        if current:
            paragraphs.append(RawParagraph(current, speaker_block=True))
        active_key = key
        current = f"{marker} {body}".strip()

    if current:
        paragraphs.append(RawParagraph(current, speaker_block=True))

    logger.debug("Transcript split: %d markers -> %d paragraphs", len(matches), len(paragraphs))
    return paragraphs


# ---------------------------------------------------------------------------
# Plain mode
# ---------------------------------------------------------------------------


def recover_speaker_blocks(paragraphs: List[str]) -> List[RawParagraph]:
    """Merge speaker headers with the paragraphs that follow them.

    WHY: When a paste separates "Jane Doe (01:23):" from the speech by
    blank lines, plain splitting gives the header its own paragraph.
    """
    untimed_count = sum(1 for p in paragraphs if _RECOVERY_HEADER_RE.match(p))

    def opens_block(paragraph: str) -> bool:
        if TIMESTAMPED_HEADER_RE.match(paragraph):
            return True
        return untimed_count >= RECOVERY_MIN_HEADERS and _RECOVERY_HEADER_RE.match(paragraph) is not None

    merged: List[RawParagraph] = []
    i = 0
    while i < len(paragraphs):
        current = paragraphs[i]
        if not opens_block(current):
            merged.append(RawParagraph(current))
            i += 1
            continue

        parts = [current]
        i += 1
        while i < len(paragraphs) and not opens_block(paragraphs[i]):
            parts.append(paragraphs[i])
            i += 1
        merged.append(RawParagraph(" ".join(parts), speaker_block=True))

    if len(merged) != len(paragraphs):
        logger.debug("Recovery merge: %d -> %d paragraphs", len(paragraphs), len(merged))
    return merged


def break_before_speaker_lines(text: str) -> str:
    """Insert a blank line before every line that opens with "Name:".

    Untimed transcripts often put one turn per line with no blank lines
    between turns; each turn becomes its own paragraph before the
    recovery merge runs.
    """
    return SPEAKER_ONLY_MARKER_RE.sub(lambda m: "\n\n" + m.group(0).lstrip(), text)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def build_paragraph(raw: RawParagraph, untimed_heads: bool) -> Optional[Paragraph]:
    """Clean and tokenize one raw paragraph; None when nothing is left."""
    cleaned = clean_paragraph(raw.text)
    allow_untimed = untimed_heads or raw.speaker_block
    tokens = tokenize(cleaned, untimed_heads=allow_untimed)
    if not tokens:
        return None
    head = parse_head(straighten_quotes(cleaned), allow_untimed)
    return Paragraph(
        raw_text=cleaned,
        tokens=tuple(tokens),
        speaker=head.name if head is not None else None,
    )


def segment(text: str, report: Optional[FormatReport] = None) -> List[Paragraph]:
    """Split normalized text into paragraphs.

    Args:
        text: Normalized document text.
        report: A FormatReport for text; computed when omitted.

    Returns:
        Cleaned paragraphs, each with at least one token.
    """
    if report is None:
        report = detect_format(text)

    if report.timestamped_markers > 0:
        raw_paragraphs = split_transcript(text)
    elif report.is_transcript:
        raw_paragraphs = recover_speaker_blocks(split_blank_lines(break_before_speaker_lines(text)))
    else:
        raw_paragraphs = recover_speaker_blocks(split_blank_lines(text))

    paragraphs = []
    for raw in raw_paragraphs:
        paragraph = build_paragraph(raw, untimed_heads=report.is_transcript)
        if paragraph is not None:
            paragraphs.append(paragraph)
    return paragraphs
