"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation.

HOW: One model per request body and response shape. The frame, pivot,
context and progress models mirror the core dataclasses field for field.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- ExportFormat values match keys in rsvp_reader.formatters.FORMATTERS
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ExportFormat(str, Enum):
    """Available export format identifiers."""

    plain_text = "plain_text"
    frames_json = "frames_json"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class TextDocumentRequest(BaseModel):
    text: str = Field(description="Raw pasted text or transcript to parse.")
    resolve_urls: bool = Field(
        default=True,
        description="When the whole text is a single http(s) URL, fetch and parse that page instead.",
    )


class UrlDocumentRequest(BaseModel):
    url: str = Field(description="http(s) URL of the page to fetch and parse.")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class ParagraphInfo(BaseModel):
    index: int = Field(description="Paragraph number (0-based).")
    speaker: Optional[str] = Field(
        default=None,
        description="Speaker name when the paragraph opens with a speaker label.",
    )
    start: int = Field(description="Global index of the paragraph's first token.")
    end: int = Field(description="Global index of the paragraph's last token (inclusive).")
    text: str = Field(description="Cleaned paragraph text.")


class DocumentResponse(BaseModel):
    """A parsed document's metadata and paragraphs."""

    id: str = Field(description="Document identifier (UUID hex).")
    source: str = Field(description="Where the text came from: 'text', a URL, or a filename.")
    is_transcript: bool = Field(description="Whether speaker-transcript parsing was used.")
    total_tokens: int = Field(description="Number of tokens in the flattened stream.")
    total_paragraphs: int = Field(description="Number of paragraphs.")
    speakers: List[str] = Field(description="Distinct canonical speaker names.")
    directory: Dict[str, str] = Field(description="Speaker name keys mapped to canonical names.")
    paragraphs: List[ParagraphInfo] = Field(description="Paragraphs in reading order.")


class PivotModel(BaseModel):
    left: str = Field(description="Text before the pivot character.")
    pivot: str = Field(description="The pivot character (empty only for empty frames).")
    right: str = Field(description="Text after the pivot character.")


class ContextModel(BaseModel):
    paragraph_index: int = Field(description="Paragraph containing the frame.")
    before: str = Field(description="Paragraph tokens before the current token.")
    active: str = Field(description="The current token.")
    after: str = Field(description="Paragraph tokens after the current token.")


class ProgressModel(BaseModel):
    current: int = Field(description="1-based position of the current token.")
    total_tokens: int = Field(description="Total tokens in the document.")
    paragraph: int = Field(description="1-based current paragraph.")
    total_paragraphs: int = Field(description="Total paragraphs in the document.")


class FrameResponse(BaseModel):
    """Everything needed to draw one reading frame."""

    index: int = Field(description="Global index the frame was resolved for (after clamping).")
    text: str = Field(description="Frame text; two tokens when a speaker name was merged.")
    advance: int = Field(description="Tokens consumed by this frame (1 or 2).")
    next_index: int = Field(description="Index of the following frame.")
    previous_index: int = Field(description="Index of the preceding frame.")
    pivot: PivotModel
    context: ContextModel
    progress: ProgressModel
    interval_ms: int = Field(description="Display time per frame at the requested wpm.")


class FormatInfo(BaseModel):
    key: str = Field(description="Format identifier used in export URLs.")
    name: str = Field(description="Human-readable format name.")


class HealthResponse(BaseModel):
    status: str = Field(description="Service status ('ok').")
    version: str = Field(description="Package version.")
    documents: int = Field(description="Documents currently stored.")


class ErrorResponse(BaseModel):
    """Consistent error body for all 4xx/5xx responses."""

    detail: str = Field(description="Human-readable error message.")
    category: Optional[str] = Field(
        default=None,
        description="Source error category when the failure came from fetching or extracting text.",
    )
