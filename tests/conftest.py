"""Shared fixtures: route every httpx.AsyncClient the code creates through a MockTransport."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest

# LEARN: Captured before any monkeypatching so fixtures (and ASGI test clients)
# can still build real clients once httpx.AsyncClient is replaced.
RealAsyncClient = httpx.AsyncClient


@pytest.fixture
def anyio_backend() -> str:
    """The code under test is asyncio-based; run async tests on asyncio only."""
    return "asyncio"

DOWNLOAD_APK_HTML = '<html><body><a><span class="download-text one-line">Download APK</span></a></body></html>'


@pytest.fixture
def mock_http(monkeypatch: pytest.MonkeyPatch) -> Callable[[Callable[[httpx.Request], Any]], list[httpx.Request]]:
    """Install a request handler; returns the list that records every request made."""

    def install(handler: Callable[[httpx.Request], Any]) -> list[httpx.Request]:
        calls: list[httpx.Request] = []

        async def recording(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            response = handler(request)
            if not isinstance(response, httpx.Response):
                response = await response
            return response

        transport = httpx.MockTransport(recording)

        def factory(*args: Any, **kwargs: Any) -> httpx.AsyncClient:
            kwargs.pop("transport", None)
            return RealAsyncClient(*args, transport=transport, **kwargs)

        monkeypatch.setattr(httpx, "AsyncClient", factory)
        return calls

    return install


def _make_app(**overrides: Any) -> dict[str, Any]:
    app = {
        "title": "Telegram",
        "packageName": "org.telegram.messenger",
        "version": "11.2.3",
        "installTotal": 1_000_000_000,
        "score": 4.5,
        "fullDownloadUrl": "https://apkpure.com/telegram/org.telegram.messenger/download",
        "icon": "https://image.winudf.com/v2/image/telegram_icon.png",
    }
    app.update(overrides)
    return app


@pytest.fixture
def apkpure_handler() -> Callable[..., Callable[[httpx.Request], httpx.Response]]:
    """Build a handler that fakes every upstream service the scraper talks to.

    Shortened icon links come back as https://tinyurl.com/icon, download
    links as https://tinyurl.com/dl-<package>.
    """

    def build(
        *,
        search_payload: Any = None,
        page_html: str | Callable[[httpx.Request], str] = DOWNLOAD_APK_HTML,
        page_status: int = 200,
        content_length: str | None = "2000000",
        failing_shorten: Callable[[str], bool] = lambda _url: False,
    ) -> Callable[[httpx.Request], httpx.Response]:
        payload = [_make_app()] if search_payload is None else search_payload

        def handler(request: httpx.Request) -> httpx.Response:
            url = request.url
            if url.host == "apkpure.com":
                return httpx.Response(200, json=payload)
            if url.host == "translate.google.com":
                html = page_html(request) if callable(page_html) else page_html
                return httpx.Response(page_status, text=html)
            if url.host == "tinyurl.com" and url.path == "/api-create.php":
                target = url.params["url"]
                if failing_shorten(target):
                    return httpx.Response(500, text="Error")
                if "d.apkpure.com" in target:
                    package = target.split("/b/", 1)[1].split("/")[1].split("?")[0]
                    return httpx.Response(200, text=f"https://tinyurl.com/dl-{package}")
                return httpx.Response(200, text="https://tinyurl.com/icon")
            if url.host == "tinyurl.com" and request.method == "HEAD":
                headers = {"Content-Length": content_length} if content_length is not None else {}
                return httpx.Response(200, headers=headers)
            return httpx.Response(404)

        return handler

    return build


@pytest.fixture
def make_app() -> Callable[..., dict[str, Any]]:
    """Factory for a complete search API item; keyword overrides replace fields."""
    return _make_app


@pytest.fixture
async def asgi_client():
    """Client bound to the server's Starlette app; unaffected by mock_http."""
    from apkpure_search.server import mcp  # noqa: PLC0415

    async with RealAsyncClient(transport=httpx.ASGITransport(app=mcp.http_app()), base_url="http://testserver") as client:
        yield client
