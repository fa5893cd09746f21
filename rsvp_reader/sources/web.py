"""Fetch a web page and extract its readable text.

WHY: Users paste the address of a transcript page instead of its text.
The page must be downloaded (directly, or through a proxy when the
direct request cannot connect) and reduced to the transcript itself.

HOW: Two stages:
  fetch_url_text()  — async httpx GET with a browser-like Accept header;
                      on a transport error the configured proxy chain is
                      tried in order; HTML bodies go to html_to_text()
  html_to_text()    — BeautifulSoup: drop page furniture, pick the first
                      container that looks like a transcript, then split
                      by speaker or collect readable paragraphs

RULES:
- Only http and https URLs are fetched (INVALID_URL otherwise)
- A non-2xx response is an HTTP error; proxies are not tried for it
- Every proxy failing at the transport level is PROXY_EXHAUSTED
- Elements holding two or more "(mm:ss):" markers are never removed
- A result with no text is an EMPTY error
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Set
from urllib.parse import quote, urlsplit

import httpx
from bs4 import BeautifulSoup
from bs4.element import Tag

from rsvp_reader.config import BROWSER_ACCEPT, load_fetch_timeout, load_proxy_urls
from rsvp_reader.core.junk_filter import classify, has_speaker_marker
from rsvp_reader.core.patterns import TIMESTAMP_COLON_RE, TIMESTAMPED_MARKER_RE
from rsvp_reader.sources.cleanup import split_transcript_by_speakers
from rsvp_reader.sources.errors import SourceError, SourceErrorCategory

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

# ---------------------------------------------------------------------------
# HTML extraction
# ---------------------------------------------------------------------------

# Always removed, whatever they contain.
_DROP_TAGS = ["script", "style", "noscript", "iframe", "embed", "object", "svg", "canvas"]

# Removed unless they hold the transcript.
_FURNITURE_SELECTORS = ", ".join([
    "nav", "header", "footer", "aside", "form", "button", "input", "select", "textarea",
    ".nav", ".navigation", ".menu", ".sidebar", ".advertisement", ".ads",
    ".social", ".share", ".comments", ".cookie", ".cookie-banner", ".newsletter", ".subscribe",
    ".breadcrumb", ".breadcrumbs", ".related", ".related-posts", ".tags", ".categories",
    "[class*='footer']", "[class*='header']", "[id*='footer']", "[id*='header']",
    "[class*='help-center']", "[class*='login']", "[class*='get-started']", "[class*='request-demo']",
])

_PROTECTED_IDS = {"main-content", "transcript-content", "content"}

_CONTAINER_SELECTORS = [
    "#main-content",
    "#transcript-content",
    "#content",
    "[class*='transcript']",
    "[id*='transcript']",
    "[class*='content']",
    "article",
    "main",
    "[role='main']",
    ".article",
    ".post",
    ".entry",
    ".story",
]

_MIN_LEAF_CHARS = 5
_MIN_BLOCK_CHARS = 20
_WHITESPACE_RE = re.compile(r"\s+")


def _text_of(element: Tag) -> str:
    return _WHITESPACE_RE.sub(" ", element.get_text(" ")).strip()


def _holds_transcript(element: Tag) -> bool:
    return len(TIMESTAMP_COLON_RE.findall(element.get_text(" "))) >= 2


def _remove_furniture(soup: BeautifulSoup) -> None:
    for tag in soup(_DROP_TAGS):
        tag.decompose()

    removed = 0
    for element in soup.select(_FURNITURE_SELECTORS):
        if element.decomposed:
            continue
        if element.get("id") in _PROTECTED_IDS or _holds_transcript(element):
            logger.debug("Keeping <%s> that holds transcript content", element.name)
            continue
        element.decompose()
        removed += 1
    logger.debug("Removed %d page furniture elements", removed)


def _find_container(soup: BeautifulSoup) -> Tag:
    for selector in _CONTAINER_SELECTORS:
        found = soup.select_one(selector)
        if found is not None and TIMESTAMP_COLON_RE.search(found.get_text(" ")):
            logger.debug("Transcript container: %s", selector)
            return found
    return soup.body or soup


def _collect_paragraphs(element: Tag, seen: Set[str], out: List[str]) -> None:
    children = element.find_all(True, recursive=False)
    if not children:
        text = _text_of(element)
        if len(text) > _MIN_LEAF_CHARS:
            _keep(text, seen, out)
        return

    for child in children:
        text = _text_of(child)
        if child.name == "p" or (child.name == "div" and len(text) > _MIN_BLOCK_CHARS):
            if text:
                _keep(text, seen, out)
        else:
            _collect_paragraphs(child, seen, out)


def _keep(text: str, seen: Set[str], out: List[str]) -> None:
    if text in seen:
        return
    if not has_speaker_marker(text) and classify(text) is not None:
        return
    seen.add(text)
    out.append(text)


def html_to_text(html: str) -> str:
    """Extract readable text from an HTML page, paragraphs separated by blank lines."""
    soup = BeautifulSoup(html, "html.parser")
    _remove_furniture(soup)
    container = _find_container(soup)
    full_text = container.get_text(" ")

    markers = len(TIMESTAMPED_MARKER_RE.findall(full_text))
    timestamps = len(TIMESTAMP_COLON_RE.findall(full_text))
    if markers >= 2 or timestamps >= 1:
        paragraphs = split_transcript_by_speakers(_WHITESPACE_RE.sub(" ", full_text))
        if paragraphs:
            logger.debug("Extracted %d transcript paragraphs from HTML", len(paragraphs))
            return "\n\n".join(paragraphs)

    paragraphs = []
    _collect_paragraphs(container, set(), paragraphs)
    if not paragraphs:
        return _WHITESPACE_RE.sub(" ", full_text).strip()
    logger.debug("Extracted %d paragraphs from HTML", len(paragraphs))
    return "\n\n".join(paragraphs)


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------


def _proxy_url(template: str, url: str) -> str:
    return template.replace("{url}", quote(url, safe=""))


async def _fetch_via_proxies(client: httpx.AsyncClient, url: str, proxies: List[str]) -> httpx.Response:
    if not proxies:
        raise SourceError(
            SourceErrorCategory.NETWORK,
            "Network error: Unable to connect. Please check your internet connection and try again.",
        )

    for i, template in enumerate(proxies):
        proxy_url = _proxy_url(template, url)
        try:
            response = await client.get(proxy_url, headers={"Accept": BROWSER_ACCEPT})
        except httpx.TransportError as exc:
            logger.warning("Proxy %d failed: %s", i + 1, exc)
            continue
        if not response.is_success and i < len(proxies) - 1:
            logger.warning("Proxy %d returned HTTP %d, trying next", i + 1, response.status_code)
            continue
        return response

    raise SourceError(
        SourceErrorCategory.PROXY_EXHAUSTED,
        "Failed to fetch URL: All proxy services are unavailable. "
        "The URL may be blocked or inaccessible.",
    )


async def fetch_url_text(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    proxies: Optional[List[str]] = None,
    timeout: Optional[float] = None,
) -> str:
    """Download url and return its readable text.

    Args:
        url: An http or https URL.
        client: httpx client to use; a new one is created (and closed)
            when omitted.
        proxies: Proxy URL templates; load_proxy_urls() when omitted.
        timeout: Request timeout in seconds; load_fetch_timeout() when omitted.

    Raises:
        SourceError: On any failure, with the category set.
    """
    parts = urlsplit(url.strip())
    if parts.scheme.lower() not in ("http", "https") or not parts.netloc:
        raise SourceError(
            SourceErrorCategory.INVALID_URL,
            "Please enter a valid URL starting with http:// or https://",
        )

    if proxies is None:
        proxies = load_proxy_urls()

    if client is None:
        async with httpx.AsyncClient(
            timeout=timeout or load_fetch_timeout(), follow_redirects=True
        ) as own_client:
            return await _fetch(own_client, url.strip(), proxies)
    return await _fetch(client, url.strip(), proxies)


async def _fetch(client: httpx.AsyncClient, url: str, proxies: List[str]) -> str:
    logger.info("Fetching %s", url)
    try:
        response = await client.get(url, headers={"Accept": BROWSER_ACCEPT, "User-Agent": USER_AGENT})
    except httpx.TransportError as exc:
        logger.warning("Direct fetch failed (%s), retrying through proxies", exc)
        response = await _fetch_via_proxies(client, url, proxies)

    if not response.is_success:
        raise SourceError(
            SourceErrorCategory.HTTP,
            f"Failed to fetch URL: HTTP error {response.status_code}. "
            "The URL may be inaccessible or blocked.",
            status_code=response.status_code,
        )

    content_type = response.headers.get("content-type", "")
    body = response.text
    if "html" in content_type.lower():
        text = html_to_text(body)
        if not text.strip():
            raise SourceError(
                SourceErrorCategory.EMPTY,
                "No readable text content found on this page. "
                "The page may require JavaScript to load content.",
            )
        return text

    if not body.strip():
        raise SourceError(SourceErrorCategory.EMPTY, "No text content found at this URL.")
    return body
