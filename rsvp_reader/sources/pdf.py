"""Extract text from PDF documents with pypdf.

Pages are extracted in order and joined with blank lines, so each page
starts a new paragraph. Image-only and encrypted PDFs have no text and
are reported as EMPTY; unreadable files as PARSE.
"""

from __future__ import annotations

import io
import logging
from typing import List, Union

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from rsvp_reader.sources.errors import SourceError, SourceErrorCategory

logger = logging.getLogger(__name__)


def extract_pdf_text(data: Union[bytes, io.BytesIO]) -> str:
    """Return the text of a PDF given its bytes."""
    stream = io.BytesIO(data) if isinstance(data, (bytes, bytearray)) else data
    try:
        reader = PdfReader(stream)
        pages: List[str] = [page.extract_text() or "" for page in reader.pages]
    except (PyPdfError, ValueError, KeyError) as exc:
        logger.warning("PDF parse failed: %s", exc)
        raise SourceError(
            SourceErrorCategory.PARSE,
            f"Failed to parse PDF: {exc}",
        ) from exc

    text = "\n\n".join(pages)
    if not text.strip():
        raise SourceError(
            SourceErrorCategory.EMPTY,
            "No text content found in PDF. The PDF may be image-based or encrypted.",
        )
    logger.info("Extracted %d pages of PDF text", len(pages))
    return text
