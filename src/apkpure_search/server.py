"""FastMCP server exposing APKPure search over plain HTTP and as an MCP tool.

HTTP routes (registered with custom_route, served by the same Starlette app):
- GET /             usage hint
- GET /api/apkpure  ?q=<text>, JSON array of enriched records
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse

from apkpure_search.models import EnrichedAppRecord
from apkpure_search.scraper import search_apps

logger = logging.getLogger(__name__)

USAGE_HINT = "Use /api/apkpure?q=<query> to search for app data."
GENERIC_ERROR = "An error occurred while fetching app data"

mcp = FastMCP(
    name="APKPure Search",
    instructions=(
        "Search APKPure for Android apps. "
        "Use search_apkpure to get matching apps with shortened icon and download links, "
        "the package format (apk or xapk) and the download size."
    ),
)


@mcp.custom_route("/", methods=["GET"])
async def index(request: Request) -> PlainTextResponse:
    return PlainTextResponse(USAGE_HINT)


@mcp.custom_route("/api/apkpure", methods=["GET"])
async def search_route(request: Request) -> JSONResponse:
    """Search APKPure for ?q= and return enriched records, or a generic 500."""
    # No presence check: a missing q is forwarded as an empty search key.
    query = request.query_params.get("q", "")
    try:
        records = await search_apps(query)
    except Exception:
        logger.exception("Error fetching app data for query %r", query)
        return JSONResponse({"error": GENERIC_ERROR}, status_code=500)

    return JSONResponse([record.model_dump(mode="json") for record in records])


@mcp.tool
async def search_apkpure(query: str) -> list[EnrichedAppRecord]:
    """Search APKPure for Android apps matching a free-text query.

    This is a QUERY tool: read-only, but every call makes several outbound
    requests per result (link shortening, page fetch, size probe).

    Args:
        query: App name or keywords (e.g. "telegram").

    Returns up to 20 apps. downloadType is "apk" or "xapk", or "Text not found" /
    "Error" when the format could not be detected. fileSize is a formatted size,
    or "Unknown size" / "Error".
    """
    return await search_apps(query)
