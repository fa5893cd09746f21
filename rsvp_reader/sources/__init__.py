"""Document sources: URL, PDF and file input.

WHY: The reader parses one raw text string. Getting that string from a
web page, a PDF or a file on disk involves I/O and third-party parsers
that the core must not depend on.

HOW: web.py fetches with httpx and extracts with BeautifulSoup, pdf.py
uses pypdf, files.py dispatches on file extension. cleanup.py holds the
transcript-aware paragraph filter used for scraped pages.

RULES:
- Every failure is a SourceError with a category
- Sources return raw text; parsing happens in rsvp_reader.core
"""

from __future__ import annotations

from rsvp_reader.sources.errors import SourceError, SourceErrorCategory
from rsvp_reader.sources.files import decode_text_bytes, read_text_file
from rsvp_reader.sources.pdf import extract_pdf_text
from rsvp_reader.sources.web import fetch_url_text, html_to_text

__all__ = [
    "SourceError",
    "SourceErrorCategory",
    "decode_text_bytes",
    "extract_pdf_text",
    "fetch_url_text",
    "html_to_text",
    "read_text_file",
]
