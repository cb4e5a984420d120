"""
Exceptions raised by the crawler.

Transient remote failures never show up here: the fetcher absorbs them.
These are the conditions that end a crawl command.
"""

from typing import Optional


class CrawlerError(Exception):
    """Base class for unrecoverable crawler errors."""


class RequestNotReplayable(CrawlerError):
    """Raised when a request body cannot be resent verbatim on retry."""


class RetryBudgetExceeded(CrawlerError):
    """Raised when an optional attempt budget runs out before a 200 arrives."""

    def __init__(self, url: str, attempts: int, last_status: Optional[int] = None):
        self.url = url
        self.attempts = attempts
        self.last_status = last_status
        detail = f"last status {last_status}" if last_status else "transport error"
        super().__init__(f"Gave up on {url} after {attempts} attempts ({detail})")


class ResponseDecodeError(CrawlerError, ValueError):
    """Raised when a successful response body is not the expected JSON."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Could not decode response from {url}: {reason}")


class InvalidKeyError(CrawlerError, ValueError):
    """Raised when an input key cannot be used, e.g. a non-numeric id."""


__all__ = [
    "CrawlerError",
    "RequestNotReplayable",
    "RetryBudgetExceeded",
    "ResponseDecodeError",
    "InvalidKeyError",
]
