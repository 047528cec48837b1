from __future__ import annotations

from typing import Optional


class CrawlError(Exception):
    """Base class for every error raised by the crawler."""


class TransientFetchError(CrawlError):
    """A single request failed: transport error or a non-200 status."""

    def __init__(self, url: str, status_code: Optional[int] = None, cause: Optional[BaseException] = None) -> None:
        self.url = url
        self.status_code = status_code
        self.cause = cause
        if status_code is not None:
            msg = f"unexpected response {status_code} for {url}"
        else:
            msg = f"request to {url} failed: {type(cause).__name__ if cause else 'unknown'}: {cause}"
        super().__init__(msg)

    @property
    def error_type(self) -> str:
        if self.status_code is not None:
            return f"HTTP_{self.status_code}"
        return type(self.cause).__name__ if self.cause else "TransientFetchError"


class CrawlCancelled(CrawlError):
    """The shared cancellation signal fired while a request was backing off."""


class DiscoveryError(CrawlError):
    """The page count could not be determined; the crawl cannot start."""


class PageTaskError(CrawlError):
    def __init__(self, page: int, url: str, reason: str) -> None:
        self.page = page
        self.url = url
        super().__init__(f"page {page} ({url}) failed: {reason}")


class AggregationError(CrawlError):
    """Writing records to the sink failed."""


class AcquisitionError(CrawlError):
    def __init__(self, page: int) -> None:
        self.page = page
        super().__init__(f"could not admit page {page}: crawl cancelled")
