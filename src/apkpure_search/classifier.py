"""Detection of the package format (APK or XAPK) offered on an APKPure download page.

The page markup is matched by label text, so a markup change upstream
degrades to TEXT_NOT_FOUND or ERROR rather than failing the caller.
Swap in another DownloadClassifier to change the matching rules.
"""

from __future__ import annotations

import logging
from typing import Protocol

import httpx
from bs4 import BeautifulSoup

from apkpure_search.config import Settings, get_settings
from apkpure_search.links import HTTP_HEADERS
from apkpure_search.models import DownloadKind

logger = logging.getLogger(__name__)

DOWNLOAD_LABEL_SELECTOR = "span.download-text.one-line"


class DownloadClassifier(Protocol):
    """Anything that can turn a download page's HTML into a DownloadKind."""

    def classify(self, html: str) -> DownloadKind: ...


class LabelTextClassifier:
    """Classify by the text of the download button label.

    APKPure renders e.g.::

        <a class="download-start-btn">
          <span class="download-text one-line">Download XAPK</span>
        </a>
    """

    def __init__(self, selector: str = DOWNLOAD_LABEL_SELECTOR) -> None:
        self.selector = selector

    def classify(self, html: str) -> DownloadKind:
        soup = BeautifulSoup(html, "lxml")
        labels = soup.select(self.selector)
        if not labels:
            return DownloadKind.TEXT_NOT_FOUND

        text = "".join(label.get_text() for label in labels).strip()
        if "Download APK" in text:
            return DownloadKind.APK
        if "Download XAPK" in text:
            return DownloadKind.XAPK
        return DownloadKind.TEXT_NOT_FOUND


async def fetch_download_type(
    url: str,
    *,
    classifier: DownloadClassifier | None = None,
    settings: Settings | None = None,
) -> DownloadKind:
    """Fetch a (proxy-wrapped) download page and classify it.

    Never raises: fetch or parse failures come back as DownloadKind.ERROR.
    """
    classifier = classifier or LabelTextClassifier()
    settings = settings or get_settings()
    try:
        async with httpx.AsyncClient(headers=HTTP_HEADERS, timeout=settings.page_timeout, follow_redirects=True) as client:
            response = await client.get(url)
            response.raise_for_status()
        return classifier.classify(response.text)
    except Exception:
        logger.exception("Error fetching the page %s", url)
        return DownloadKind.ERROR
