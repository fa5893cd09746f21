"""Plain text export with speaker-labelled paragraphs.

WHY: Cleaning a scraped transcript is useful on its own: the export
gives the reader's view of the document (boilerplate gone, speaker turns
merged) as ordinary text.

HOW: One block per paragraph. Paragraphs that open with a speaker head
get a "Name:" header line and the remaining tokens on the next line; a
title token stays in front of the name. Other paragraphs are their
tokens joined by spaces.

RULES:
- Header format: "Name:" on its own line, text on the next line
- Double newline between paragraphs
- Output ends with a single newline; empty documents give ""
- Output suffix: "-reader.txt"
- Media type: "text/plain"
"""

from __future__ import annotations

from typing import List

from rsvp_reader.core.ir import DocumentSnapshot, Paragraph
from rsvp_reader.formatters.base import BaseFormatter, FormatterOutput


def _head_length(paragraph: Paragraph) -> int:
    """Number of leading tokens that make up the speaker head."""
    if not paragraph.speaker:
        return 0
    for i, token in enumerate(paragraph.tokens[:2]):
        if token.endswith(":"):
            return i + 1
    return 0


def render_paragraph(paragraph: Paragraph) -> str:
    head = _head_length(paragraph)
    body = " ".join(paragraph.tokens[head:])
    if not head:
        return body
    header = " ".join(paragraph.tokens[:head])
    return f"{header}\n{body}" if body else header


class PlainTextFormatter(BaseFormatter):
    """Speaker-labelled plain text."""

    @property
    def name(self) -> str:
        return "Plain Text"

    def format(self, document: DocumentSnapshot) -> list[FormatterOutput]:
        blocks: List[str] = [render_paragraph(p) for p in document.paragraphs]
        content = "\n\n".join(blocks)
        if content:
            content += "\n"
        return [FormatterOutput(suffix="-reader.txt", content=content, media_type="text/plain")]
