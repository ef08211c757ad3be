"""Exception taxonomy for outbound calls.

Components that degrade to sentinel strings never raise these; they are
reserved for failures the caller is expected to handle (or let fail the request).
"""

from __future__ import annotations


class ApkPureError(Exception):
    """Base class for every error raised by apkpure_search."""


class InvalidArgumentError(ApkPureError, ValueError):
    """A required input was empty or missing."""


class ServiceError(ApkPureError):
    """An outbound HTTP call failed: non-success status, timeout or transport error."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseError(ApkPureError):
    """An upstream response had an unexpected shape."""
