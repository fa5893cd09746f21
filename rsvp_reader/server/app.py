"""FastAPI application exposing the reader pipeline over HTTP.

WHY: Browser front ends and other tools need the parsed frame stream
without reimplementing transcript parsing. Submitting a document once and
requesting frames by index keeps every client's playback logic thin: the
server answers "what do I draw at index N" with the merged-name frame,
its pivot split, paragraph context and progress counters.

HOW: A single FastAPI app with endpoints grouped by tags. POST endpoints
accept pasted text (JSON), a URL (JSON) or an uploaded file (multipart),
parse it with build_document() and keep the snapshot in a DocumentStore.
GET endpoints return document metadata, single frames and formatter
exports. A lifespan task expires idle documents.

RULES:
- All endpoints have OpenAPI descriptions on every parameter and response
- Error responses use a consistent ErrorResponse schema
- SourceError maps to 400 (bad input), 422 (nothing readable) or 502
  (upstream fetch failure), with the category in the body
- Input that yields no tokens is rejected with 422, never stored
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated, List

from fastapi import FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from rsvp_reader import __version__
from rsvp_reader.config import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_WPM, load_document_ttl, load_log_level
from rsvp_reader.core.frames import clamp_index, frame_at, paragraph_context, previous_index, progress
from rsvp_reader.core.ir import DocumentSnapshot
from rsvp_reader.core.normalizer import parse_url_only_input
from rsvp_reader.core.pipeline import build_document
from rsvp_reader.core.pivot import pivot_parts
from rsvp_reader.formatters import FORMATTERS
from rsvp_reader.server.models import (
    ContextModel,
    DocumentResponse,
    ErrorResponse,
    ExportFormat,
    FormatInfo,
    FrameResponse,
    HealthResponse,
    ParagraphInfo,
    PivotModel,
    ProgressModel,
    TextDocumentRequest,
    UrlDocumentRequest,
)
from rsvp_reader.server.store import DocumentStore, StoredDocument
from rsvp_reader.sources.errors import SourceError, SourceErrorCategory
from rsvp_reader.sources.files import decode_text_bytes
from rsvp_reader.sources.web import fetch_url_text

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

document_store = DocumentStore(ttl_seconds=load_document_ttl())

CLEANUP_INTERVAL_S = 300


async def _periodic_cleanup() -> None:
    """Expire idle documents every 5 minutes."""
    while True:
        await asyncio.sleep(CLEANUP_INTERVAL_S)
        document_store.cleanup_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start periodic cleanup on startup, cancel on shutdown."""
    task = asyncio.create_task(_periodic_cleanup())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


app = FastAPI(
    lifespan=lifespan,
    title="RSVP Reader API",
    description=(
        "REST API for turning pasted text, web pages, PDFs and speaker "
        "transcripts into rapid serial visual presentation frames. Submit a "
        "document, then request frames by index or export the parsed result."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

_SOURCE_ERROR_STATUS = {
    SourceErrorCategory.INVALID_URL: 400,
    SourceErrorCategory.UNSUPPORTED: 400,
    SourceErrorCategory.EMPTY: 422,
    SourceErrorCategory.PARSE: 422,
    SourceErrorCategory.NETWORK: 502,
    SourceErrorCategory.PROXY_EXHAUSTED: 502,
    SourceErrorCategory.HTTP: 502,
}


@app.exception_handler(SourceError)
async def source_error_handler(request: Request, exc: SourceError) -> JSONResponse:
    status_code = _SOURCE_ERROR_STATUS.get(exc.category, 400)
    logger.warning("Source error (%s) on %s: %s", exc.category.value, request.url.path, exc.message)
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=exc.message, category=exc.category.value).model_dump(),
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _document_to_response(stored: StoredDocument) -> DocumentResponse:
    """Convert a StoredDocument to a DocumentResponse Pydantic model."""
    doc = stored.document
    paragraphs = []
    for i, paragraph in enumerate(doc.paragraphs):
        start = doc.offsets[i]
        paragraphs.append(ParagraphInfo(
            index=i,
            speaker=paragraph.speaker,
            start=start,
            end=start + len(paragraph.tokens) - 1,
            text=paragraph.raw_text,
        ))
    return DocumentResponse(
        id=stored.id,
        source=stored.source,
        is_transcript=doc.is_transcript,
        total_tokens=doc.total_tokens,
        total_paragraphs=len(doc.paragraphs),
        speakers=doc.directory.canonical_names(),
        directory=doc.directory.to_dict(),
        paragraphs=paragraphs,
    )


def _store_document(document: DocumentSnapshot, source: str) -> StoredDocument:
    if document.is_empty:
        raise HTTPException(status_code=422, detail="No readable text found in the submitted input.")
    try:
        return document_store.add(document, source)
    except ValueError as exc:
        raise HTTPException(status_code=429, detail=str(exc))


def _get_or_404(document_id: str) -> StoredDocument:
    stored = document_store.get(document_id)
    if stored is None:
        raise HTTPException(status_code=404, detail="Document not found: {}".format(document_id))
    return stored


def _interval_ms(wpm: int) -> int:
    return int(60000 / wpm) if wpm > 0 else 0


# ---------------------------------------------------------------------------
# Endpoints: Documents
# ---------------------------------------------------------------------------


@app.post(
    "/documents",
    response_model=DocumentResponse,
    status_code=201,
    tags=["documents"],
    summary="Submit pasted text",
    description=(
        "Parse pasted text or a speaker transcript. When the whole text is a "
        "single http(s) URL and resolve_urls is true, the page is fetched instead."
    ),
    responses={
        422: {"model": ErrorResponse, "description": "No readable text"},
        429: {"model": ErrorResponse, "description": "Too many stored documents"},
        502: {"model": ErrorResponse, "description": "URL could not be fetched"},
    },
)
async def create_document(body: TextDocumentRequest) -> DocumentResponse:
    url = parse_url_only_input(body.text) if body.resolve_urls else None
    if url is not None:
        text = await fetch_url_text(url)
        source = url
    else:
        text = body.text
        source = "text"

    stored = _store_document(build_document(text), source)
    return _document_to_response(stored)


@app.post(
    "/documents/url",
    response_model=DocumentResponse,
    status_code=201,
    tags=["documents"],
    summary="Fetch and parse a web page",
    description=(
        "Download the page, extract its transcript or article text, and parse it. "
        "Public CORS proxies are tried when the direct request cannot connect."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Not an http(s) URL"},
        422: {"model": ErrorResponse, "description": "No readable text on the page"},
        429: {"model": ErrorResponse, "description": "Too many stored documents"},
        502: {"model": ErrorResponse, "description": "URL could not be fetched"},
    },
)
async def create_document_from_url(body: UrlDocumentRequest) -> DocumentResponse:
    text = await fetch_url_text(body.url)
    stored = _store_document(build_document(text), body.url.strip())
    return _document_to_response(stored)


@app.post(
    "/documents/upload",
    response_model=DocumentResponse,
    status_code=201,
    tags=["documents"],
    summary="Upload a PDF, text or HTML file",
    description="Extract text from the uploaded file according to its extension and parse it.",
    responses={
        400: {"model": ErrorResponse, "description": "Unsupported file type"},
        422: {"model": ErrorResponse, "description": "File has no readable text"},
        429: {"model": ErrorResponse, "description": "Too many stored documents"},
    },
)
async def upload_document(
    file: Annotated[
        UploadFile,
        File(description="PDF, plain text, Markdown, subtitle or HTML file."),
    ],
) -> DocumentResponse:
    # Sanitize filename to prevent path traversal in the reported source
    filename = Path(file.filename or "upload.txt").name
    data = await file.read()
    text = decode_text_bytes(data, filename)
    stored = _store_document(build_document(text), filename)
    return _document_to_response(stored)


@app.get(
    "/documents/{document_id}",
    response_model=DocumentResponse,
    tags=["documents"],
    summary="Get a parsed document",
    description="Returns paragraphs with their token ranges, speakers and the speaker directory.",
    responses={
        404: {"model": ErrorResponse, "description": "Document not found"},
    },
)
async def get_document(document_id: str) -> DocumentResponse:
    return _document_to_response(_get_or_404(document_id))


@app.get(
    "/documents/{document_id}/frames/{index}",
    response_model=FrameResponse,
    tags=["documents"],
    summary="Get the frame at a token index",
    description=(
        "Resolve the frame shown at a global token index. Out-of-range indices "
        "are clamped. A two-word speaker name is returned as one frame with "
        "advance 2; next_index and previous_index give the neighbouring frames."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Document not found"},
    },
)
async def get_frame(
    document_id: str,
    index: int,
    wpm: Annotated[
        int,
        Query(description="Reading speed used to compute interval_ms.", ge=1),
    ] = DEFAULT_WPM,
) -> FrameResponse:
    doc = _get_or_404(document_id).document
    clamped = clamp_index(doc, index)
    frame = frame_at(doc, clamped)
    pivot = pivot_parts(frame.display_text)
    context = paragraph_context(doc, clamped)
    counters = progress(doc, clamped)

    return FrameResponse(
        index=clamped,
        text=frame.display_text,
        advance=frame.advance,
        next_index=min(clamped + frame.advance, doc.last_index),
        previous_index=previous_index(doc, clamped),
        pivot=PivotModel(left=pivot.left, pivot=pivot.pivot, right=pivot.right),
        context=ContextModel(
            paragraph_index=context.paragraph_index,
            before=context.before,
            active=context.active,
            after=context.after,
        ),
        progress=ProgressModel(
            current=counters.current,
            total_tokens=counters.total_tokens,
            paragraph=counters.paragraph,
            total_paragraphs=counters.total_paragraphs,
        ),
        interval_ms=_interval_ms(wpm),
    )


@app.get(
    "/documents/{document_id}/export/{format_key}",
    tags=["documents"],
    summary="Export a parsed document",
    description="Run a formatter over the document and download the result.",
    responses={
        404: {"model": ErrorResponse, "description": "Document not found"},
    },
)
async def export_document(document_id: str, format_key: ExportFormat) -> Response:
    stored = _get_or_404(document_id)
    formatter = FORMATTERS[format_key.value]()
    output = formatter.format(stored.document)[0]
    filename = f"{stored.id}{output.suffix}"
    return Response(
        content=output.content,
        media_type=output.media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.delete(
    "/documents/{document_id}",
    status_code=204,
    tags=["documents"],
    summary="Delete a parsed document",
    description="Remove the document from the store. Idle documents also expire on their own.",
    responses={
        404: {"model": ErrorResponse, "description": "Document not found"},
    },
)
async def delete_document(document_id: str) -> Response:
    if not document_store.delete(document_id):
        raise HTTPException(status_code=404, detail="Document not found: {}".format(document_id))
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Endpoints: Formats and health
# ---------------------------------------------------------------------------


@app.get(
    "/formats",
    response_model=List[FormatInfo],
    tags=["formats"],
    summary="List available export formats",
    description="Returns all export formats with their identifiers and human-readable names.",
)
async def list_formats() -> List[FormatInfo]:
    return [
        FormatInfo(key=key, name=formatter_cls().name)
        for key, formatter_cls in sorted(FORMATTERS.items())
    ]


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness and readiness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__, documents=len(document_store))


def run_api(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    """Entry point for the rsvp-api console script."""
    import uvicorn
    uvicorn.run(app, host=host, port=port)


def main() -> None:
    logging.basicConfig(
        level=load_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting API on %s:%d", DEFAULT_HOST, DEFAULT_PORT)
    run_api()


if __name__ == "__main__":
    main()
