"""Read a local file as document text.

PDFs go through extract_pdf_text(); known text extensions are decoded as
UTF-8 (undecodable bytes replaced); HTML files go through html_to_text().
Anything else is UNSUPPORTED.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from rsvp_reader.config import PDF_EXTENSIONS, TEXT_EXTENSIONS
from rsvp_reader.sources.errors import SourceError, SourceErrorCategory
from rsvp_reader.sources.pdf import extract_pdf_text
from rsvp_reader.sources.web import html_to_text

logger = logging.getLogger(__name__)

HTML_EXTENSIONS = {".html", ".htm"}


def decode_text_bytes(data: bytes, filename: str) -> str:
    """Turn uploaded bytes into text according to the file's extension."""
    suffix = Path(filename).suffix.lower()
    if suffix in PDF_EXTENSIONS:
        return extract_pdf_text(data)
    if suffix and suffix not in TEXT_EXTENSIONS:
        raise SourceError(
            SourceErrorCategory.UNSUPPORTED,
            f"Unsupported file type: {suffix} (expected .pdf or a text file)",
        )

    text = data.decode("utf-8", errors="replace")
    if suffix in HTML_EXTENSIONS:
        text = html_to_text(text)
    if not text.strip():
        raise SourceError(SourceErrorCategory.EMPTY, f"No text content found in {filename}.")
    return text


def read_text_file(path: Union[str, Path]) -> str:
    """Read path and return its document text."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise SourceError(SourceErrorCategory.PARSE, f"Cannot read {path}: {exc.strerror}") from exc
    logger.info("Read %s (%d bytes)", path.name, len(data))
    return decode_text_bytes(data, path.name)
