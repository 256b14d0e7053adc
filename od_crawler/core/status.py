"""
HTTP status classification.

Whether a failure is worth retrying is decided from the
:class:`Outcome` alone, never from the response body.
"""

from od_crawler.errors import (
    ForbiddenError, HTTPStatusError, Outcome, RateLimitedError,
)


def classify_status(code: int) -> Outcome:
    """Map an HTTP status code to an :class:`Outcome`."""
    if code == 200:
        return Outcome.OK
    if code == 429:
        return Outcome.RATE_LIMITED
    if code in (401, 403):
        return Outcome.FORBIDDEN
    return Outcome.OTHER


def check_status_code(code: int) -> None:
    """Raise the :class:`CrawlError` matching *code*; return on 200."""
    outcome = classify_status(code)
    if outcome is Outcome.OK:
        return
    if outcome is Outcome.RATE_LIMITED:
        raise RateLimitedError(code)
    if outcome is Outcome.FORBIDDEN:
        raise ForbiddenError(code)
    raise HTTPStatusError(code)


def should_retry(outcome: Outcome, attempt: int, retries: int) -> bool:
    """Whether a Job that failed on its *attempt*-th fetch gets another.

    Only rate limiting is considered transient; every other outcome is
    terminal for the Job.
    """
    return outcome is Outcome.RATE_LIMITED and attempt <= retries
