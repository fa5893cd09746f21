"""Frame stream JSON export.

WHY: Other players (a browser front end, a subtitle renderer) want the
reader's frames without re-implementing the parsing rules. The export
carries exactly what frame_at() and pivot_parts() produce.

HOW: Walks the document from index 0, stepping by each frame's advance,
so a merged "Jane Doe" frame appears once and its second token is
skipped. Paragraph and directory metadata are included. The output is
validated with jsonschema against frames_schema.json before returning.

RULES:
- frames[i].index is the global index of the frame's first token
- paragraphs[i].start/end are inclusive global token indices
- Validate output against the schema before returning; raise on failure
- Output suffix: "-frames.json"
- Media type: "application/json"
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

import jsonschema

from rsvp_reader.core.frames import frame_at, locate, paragraph_bounds
from rsvp_reader.core.ir import DocumentSnapshot
from rsvp_reader.core.pivot import pivot_parts
from rsvp_reader.formatters.base import BaseFormatter, FormatterOutput

FORMAT_VERSION = "1.0.0"

SCHEMA_PATH = Path(__file__).resolve().parent / "frames_schema.json"

_CACHED_SCHEMA: dict[str, Any] | None = None


def get_schema() -> dict[str, Any]:
    """The frame stream JSON schema, loaded once."""
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


def build_frames(document: DocumentSnapshot) -> List[Dict[str, Any]]:
    frames: List[Dict[str, Any]] = []
    index = 0
    while index < document.total_tokens:
        frame = frame_at(document, index)
        parts = pivot_parts(frame.display_text)
        frames.append({
            "index": index,
            "text": frame.display_text,
            "advance": frame.advance,
            "paragraph": locate(document, index).paragraph_index,
            "pivot": {"left": parts.left, "pivot": parts.pivot, "right": parts.right},
        })
        index += frame.advance
    return frames


def build_payload(document: DocumentSnapshot) -> Dict[str, Any]:
    paragraphs = []
    for i, paragraph in enumerate(document.paragraphs):
        start, end = paragraph_bounds(document, i)
        paragraphs.append({
            "index": i,
            "speaker": paragraph.speaker,
            "start": start,
            "end": end,
            "text": paragraph.raw_text,
        })

    return {
        "version": FORMAT_VERSION,
        "document": {
            "is_transcript": document.is_transcript,
            "total_tokens": document.total_tokens,
            "total_paragraphs": len(document.paragraphs),
            "speakers": document.directory.canonical_names(),
            "directory": document.directory.to_dict(),
        },
        "paragraphs": paragraphs,
        "frames": build_frames(document),
    }


class FramesJsonFormatter(BaseFormatter):
    """Document metadata plus the full frame stream as JSON."""

    @property
    def name(self) -> str:
        return "Frame Stream JSON"

    def format(self, document: DocumentSnapshot) -> list[FormatterOutput]:
        payload = build_payload(document)
        jsonschema.validate(instance=payload, schema=get_schema())
        content = json.dumps(payload, indent=2, ensure_ascii=False)
        return [FormatterOutput(suffix="-frames.json", content=content, media_type="application/json")]
