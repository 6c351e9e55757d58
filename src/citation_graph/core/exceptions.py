"""Errors raised by the paper data source."""

from __future__ import annotations

from typing import Optional


class DataSourceError(Exception):
    """Base class for failures that abort a crawl."""


class TransportError(DataSourceError):
    """The request never produced an HTTP response."""


class ResponseParseError(DataSourceError):
    """The response body was not the expected JSON shape."""

    def __init__(self, message: str, text: str):
        super().__init__(message)
        self.text = text


class UpstreamError(DataSourceError):
    """The upstream answered with an error status that is not worth retrying."""

    def __init__(self, status_code: int, body: str = ""):
        super().__init__(f"Upstream returned HTTP {status_code}: {body[:200]}")
        self.status_code = status_code
        self.body = body


class RateLimitError(DataSourceError):
    """
    We are being throttled.

    Raised once "too many requests" retries are exhausted, or when the
    rate-limiting proxy reports that it gave up on our behalf.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
