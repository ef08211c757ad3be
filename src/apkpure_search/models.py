"""Data models for APKPure search results.

`SearchResult` mirrors one item of the upstream search-suggestion API.
`EnrichedAppRecord` is the output shape, serialized by alias so the JSON
keys stay camelCase.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class DownloadKind(StrEnum):
    """Package format detected on an app's download page.

    The last two members are sentinels, not formats.
    """

    APK = "apk"
    XAPK = "xapk"
    TEXT_NOT_FOUND = "Text not found"
    ERROR = "Error"


# JSON keys that must all be present and truthy before an item is enriched.
REQUIRED_FIELDS = (
    "title",
    "packageName",
    "version",
    "installTotal",
    "score",
    "fullDownloadUrl",
    "icon",
)


class SearchResult(BaseModel):
    """A single hit from the APKPure search-suggestion API."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    title: str = Field(description="App title")
    package_name: str = Field(alias="packageName", description="Android package name (e.g. 'org.telegram.messenger')")
    version: str = Field(description="Latest version string")
    install_total: int | float | str = Field(alias="installTotal", description="Total install count, passed through as sent")
    score: int | float | str = Field(description="Average user rating, passed through as sent")
    full_download_url: str = Field(alias="fullDownloadUrl", description="APKPure download page URL")
    icon: str = Field(description="Icon image URL")


class EnrichedAppRecord(BaseModel):
    """A search hit with shortened links, detected format and probed size."""

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)

    title: str
    package_name: str = Field(alias="packageName")
    version: str
    install_total: int | float | str = Field(alias="installTotal")
    score: int | float | str
    download_url: str = Field(alias="downloadUrl", description="Shortened, proxied download link")
    icon: str = Field(description="Shortened icon link")
    file_size: str = Field(alias="fileSize", description="Formatted size, 'Unknown size' or 'Error'")
    download_type: DownloadKind = Field(alias="downloadType")
