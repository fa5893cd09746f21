"""Turn one raw input string into a DocumentSnapshot.

WHY: Every entry point (session, CLI, HTTP API) needs the same parse.
Keeping the stage order in one function means they cannot drift.

HOW:
    raw ─ normalize ─ detect_format ─ segment ─ build_directory ─ snapshot

RULES:
- Total: any string, including "", yields a snapshot
- The snapshot is built completely before it is returned
"""

from __future__ import annotations

import logging

from rsvp_reader.core.format_detector import detect_format
from rsvp_reader.core.ir import DocumentSnapshot
from rsvp_reader.core.normalizer import normalize
from rsvp_reader.core.segmenter import segment
from rsvp_reader.core.speakers import build_directory

logger = logging.getLogger(__name__)


def build_document(raw: str) -> DocumentSnapshot:
    """Parse raw text into an immutable document snapshot."""
    text = normalize(raw)
    report = detect_format(text)
    paragraphs = segment(text, report)
    directory = build_directory(text, paragraphs)

    doc = DocumentSnapshot.from_paragraphs(
        paragraphs, directory=directory, is_transcript=report.is_transcript
    )
    logger.info(
        "Parsed document: %d paragraphs, %d tokens, %d speakers (transcript=%s)",
        len(doc.paragraphs), doc.total_tokens,
        len(directory.canonical_names()), doc.is_transcript,
    )
    return doc
