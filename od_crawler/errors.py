"""
Crawl outcomes and the exception hierarchy.

Every failure that ends a single Job is a :class:`CrawlError` carrying
the :class:`Outcome` it was classified as.
"""

from enum import Enum


class Outcome(Enum):
    OK = "ok"
    RATE_LIMITED = "rate_limited"
    FORBIDDEN = "forbidden"
    OTHER = "other"
    TRANSPORT = "transport"


class CrawlError(Exception):
    """Base class for failures that end a single Job."""

    outcome = Outcome.OTHER

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class RateLimitedError(CrawlError):
    outcome = Outcome.RATE_LIMITED

    def __init__(self, code: int = 429) -> None:
        super().__init__("rate limited", code)


class ForbiddenError(CrawlError):
    outcome = Outcome.FORBIDDEN

    def __init__(self, code: int = 403) -> None:
        super().__init__("access denied", code)


class HTTPStatusError(CrawlError):
    outcome = Outcome.OTHER

    def __init__(self, code: int) -> None:
        super().__init__(f"got HTTP status {code}", code)


class TransportError(CrawlError):
    """DNS, connect, timeout or malformed-response failure."""

    outcome = Outcome.TRANSPORT


class RemoteError(Exception):
    """The remote task source could not be reached or answered badly."""
