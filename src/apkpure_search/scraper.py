"""Search APKPure and enrich every hit.

Fetches the search-suggestion API, drops incomplete items, then enriches
each remaining hit concurrently: detects its package format, shortens its
icon and download links, and probes the download size.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from apkpure_search.classifier import DownloadClassifier, fetch_download_type
from apkpure_search.config import Settings, get_settings
from apkpure_search.errors import ParseError, ServiceError
from apkpure_search.links import (
    HTTP_HEADERS,
    TRANSLATE_PROXY_URL,
    build_api_url,
    build_proxy_url,
    encode_component,
    fetch_file_size,
    shorten_url,
)
from apkpure_search.models import REQUIRED_FIELDS, DownloadKind, EnrichedAppRecord, SearchResult

logger = logging.getLogger(__name__)

APKPURE_SEARCH_URL = "https://apkpure.com/api/v1/search_suggestion_new"
DOWNLOAD_CDN_URL = "https://d.apkpure.com"


def _build_search_url(query: str, limit: int) -> str:
    return f"{APKPURE_SEARCH_URL}?key={encode_component(query)}&limit={limit}"


def build_download_url(package_name: str, download_type: DownloadKind) -> str:
    """Build the translate-proxied CDN link for the latest build of a package.

    Only XAPK gets its own path; APK and both sentinels fall back to the APK path.
    """
    # TODO: confirm whether TEXT_NOT_FOUND/ERROR should keep defaulting to the APK path
    # or be reported without a download link.
    segment = "XAPK" if download_type is DownloadKind.XAPK else "APK"
    # Both paths embed "?version=latest" unencoded; u is the last parameter, so the
    # whole remainder is its value and "=" needs no escaping.
    cdn_url = f"{DOWNLOAD_CDN_URL}/b/{segment}/{package_name}?version=latest"
    return f"{TRANSLATE_PROXY_URL}?sl=en&tl=fr&hl=en&client=webapp&u={cdn_url}"


def _is_complete(item: Any) -> bool:
    return isinstance(item, dict) and all(item.get(field) for field in REQUIRED_FIELDS)


def parse_search_results(data: Any) -> list[SearchResult]:
    """Turn the decoded search API payload into SearchResult models.

    Raises ParseError if the payload is not a list. Items missing any
    required field are skipped.
    """
    if not isinstance(data, list):
        msg = f"Unexpected data format: expected a list, got {type(data).__name__}"
        raise ParseError(msg)

    results: list[SearchResult] = []
    for item in data:
        if not _is_complete(item):
            continue
        try:
            results.append(SearchResult.model_validate(item))
        except ValidationError:
            logger.warning("Skipping malformed search result %r", item.get("packageName"), exc_info=True)
    return results


async def fetch_search_results(query: str, *, settings: Settings | None = None) -> list[SearchResult]:
    """Query the APKPure search-suggestion API."""
    settings = settings or get_settings()
    search_url = _build_search_url(query, settings.search_limit)

    try:
        async with httpx.AsyncClient(headers=HTTP_HEADERS, timeout=settings.search_timeout, follow_redirects=True) as client:
            response = await client.get(search_url)
    except httpx.HTTPError as exc:
        msg = f"Failed to fetch app data: {exc}"
        raise ServiceError(msg) from exc

    if not response.is_success:
        msg = f"Failed to fetch app data: HTTP {response.status_code}"
        raise ServiceError(msg, status_code=response.status_code)

    try:
        data = response.json()
    except ValueError as exc:
        msg = "Search API returned a non-JSON body"
        raise ParseError(msg) from exc

    return parse_search_results(data)


async def enrich_app(
    result: SearchResult,
    *,
    classifier: DownloadClassifier | None = None,
    settings: Settings | None = None,
) -> EnrichedAppRecord:
    """Enrich one search hit.

    Format detection and size probing degrade to sentinels; shortener
    failures propagate.
    """
    settings = settings or get_settings()

    page_url = build_proxy_url(build_api_url(result.full_download_url))
    download_type = await fetch_download_type(page_url, classifier=classifier, settings=settings)

    icon = await shorten_url(result.icon, settings=settings)
    download_url = await shorten_url(build_download_url(result.package_name, download_type), settings=settings)
    file_size = await fetch_file_size(download_url, settings=settings)

    return EnrichedAppRecord(
        title=result.title,
        package_name=result.package_name,
        version=result.version,
        install_total=result.install_total,
        score=result.score,
        download_url=download_url,
        icon=icon,
        file_size=file_size,
        download_type=download_type,
    )


async def search_apps(
    query: str,
    *,
    classifier: DownloadClassifier | None = None,
    settings: Settings | None = None,
) -> list[EnrichedAppRecord]:
    """Search APKPure and return enriched records in upstream order.

    Enrichments run concurrently, at most settings.max_concurrent_enrichments
    at a time. With item_failure_policy "abort" the first failed item
    (in input order) is re-raised once every item has settled, so a failing
    request only returns after its slowest item finishes; with "skip"
    failed items are logged and left out.
    """
    settings = settings or get_settings()
    results = await fetch_search_results(query, settings=settings)

    semaphore = asyncio.Semaphore(settings.max_concurrent_enrichments)

    async def _bounded(result: SearchResult) -> EnrichedAppRecord:
        async with semaphore:
            return await enrich_app(result, classifier=classifier, settings=settings)

    # LEARN: gather() preserves argument order regardless of completion order,
    # so outcomes line up with results.
    outcomes = await asyncio.gather(*(_bounded(r) for r in results), return_exceptions=True)

    records: list[EnrichedAppRecord] = []
    for result, outcome in zip(results, outcomes, strict=True):
        if isinstance(outcome, BaseException):
            if settings.item_failure_policy == "skip" and isinstance(outcome, Exception):
                logger.warning("Skipping %s: enrichment failed", result.package_name, exc_info=outcome)
                continue
            raise outcome
        records.append(outcome)
    return records
