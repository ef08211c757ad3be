"""Link helpers: translate-proxy wrapping, TinyURL shortening and HEAD size probes.

The translate proxy is used purely as an indirection layer so APKPure pages
and CDN links can be fetched without hitting the site's bot filter directly.
"""

from __future__ import annotations

import logging
from urllib.parse import quote, urlencode

import httpx

from apkpure_search.config import Settings, get_settings
from apkpure_search.errors import InvalidArgumentError, ServiceError

logger = logging.getLogger(__name__)

TRANSLATE_PROXY_URL = "https://translate.google.com/translate"
TINYURL_API_URL = "https://tinyurl.com/api-create.php"

HTTP_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; apkpure-search/0.1)",
}

UNKNOWN_SIZE = "Unknown size"
SIZE_ERROR = "Error"

# LEARN: Decimal (SI) units, largest first, so the first threshold that fits wins.
_SIZE_UNITS = (
    (1_000_000_000_000, "TB"),
    (1_000_000_000, "GB"),
    (1_000_000, "MB"),
    (1_000, "KB"),
)


def encode_component(value: str) -> str:
    """Percent-encode a value for embedding as a single query parameter."""
    # Same reserved set as JavaScript's encodeURIComponent.
    return quote(value, safe="!*'()")


def format_file_size(num_bytes: int) -> str:
    """Format a byte count with 1000-based units, e.g. 1_500_000 -> '1.50 MB'."""
    for threshold, unit in _SIZE_UNITS:
        if num_bytes >= threshold:
            return f"{num_bytes / threshold:.2f} {unit}"
    return f"{num_bytes} bytes"


def build_api_url(base: str, path: str = "", query: dict[str, str] | None = None) -> str:
    """Join a base URL, an optional path and an optional query string."""
    query_string = urlencode(query) if query else ""
    return base + path + (f"?{query_string}" if query_string else "")


def build_proxy_url(url: str | None) -> str:
    """Wrap url in a translate-proxy URL. Empty input gives an empty string."""
    if not url:
        return ""
    return f"{TRANSLATE_PROXY_URL}?sl=en&tl=fr&hl=en&u={encode_component(url)}&client=webapp"


async def shorten_url(url: str | None, *, settings: Settings | None = None) -> str:
    """Shorten url through TinyURL and return the response body verbatim.

    Raises InvalidArgumentError for empty input and ServiceError when the
    shortener answers with a non-success status or cannot be reached.
    """
    if not url:
        msg = "Please provide a URL or link to shorten."
        raise InvalidArgumentError(msg)

    settings = settings or get_settings()
    api_url = f"{TINYURL_API_URL}?url={encode_component(url)}"

    try:
        async with httpx.AsyncClient(headers=HTTP_HEADERS, timeout=settings.shorten_timeout, follow_redirects=True) as client:
            response = await client.get(api_url)
    except httpx.HTTPError as exc:
        logger.exception("Error shortening URL %s", url)
        msg = f"Could not reach the URL shortener: {exc}"
        raise ServiceError(msg) from exc

    if not response.is_success:
        logger.error("URL shortener returned HTTP %s for %s", response.status_code, url)
        msg = "Could not generate a short URL."
        raise ServiceError(msg, status_code=response.status_code)

    return response.text


async def fetch_file_size(url: str, *, settings: Settings | None = None) -> str:
    """Probe url with a HEAD request and format its Content-Length.

    Never raises: returns UNKNOWN_SIZE when the header is missing and
    SIZE_ERROR on any failure.
    """
    settings = settings or get_settings()
    try:
        async with httpx.AsyncClient(headers=HTTP_HEADERS, timeout=settings.probe_timeout, follow_redirects=True) as client:
            response = await client.head(url)
            response.raise_for_status()

        content_length = response.headers.get("Content-Length")
        if not content_length:
            return UNKNOWN_SIZE
        return format_file_size(int(content_length))
    except Exception:
        logger.exception("Error fetching file size for %s", url)
        return SIZE_ERROR
