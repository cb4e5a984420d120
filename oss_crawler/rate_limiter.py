"""
Rate limit signals for remote API responses.

Extracts the two header families that tell the crawler when it may resume:
an explicit ``Retry-After`` directive and the ``X-RateLimit-*`` quota pair.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Optional

import requests


RETRY_AFTER_HEADER = "retry-after"
REMAINING_HEADER = "x-ratelimit-remaining"
LIMIT_HEADER = "x-ratelimit-limit"
RESET_HEADER = "x-ratelimit-reset"
RESOURCE_HEADER = "x-ratelimit-resource"

# Larger header values are clamped so they stay exact as floats.
MAX_HEADER_SECONDS = 2 ** 53


class SignalKind(str, Enum):
    """Where an authoritative resumption time came from."""
    RETRY_AFTER = "retry_after"
    RATELIMIT_RESET = "ratelimit_reset"


@dataclass(frozen=True)
class RateLimitSignal:
    """Authoritative resumption deadline announced by the server."""
    kind: SignalKind
    deadline: float  # time.monotonic() instant


@dataclass
class RateLimitStatus:
    """Current rate limit status."""
    remaining: int
    limit: Optional[int]
    reset_at: Optional[int]  # Unix timestamp
    resource: Optional[str] = None

    @property
    def exhausted(self) -> bool:
        return self.remaining == 0


def _parse_uint(value: Optional[str]) -> Optional[int]:
    """Parse an unsigned decimal header value, or None if it is not one."""
    if value is None:
        return None
    if not value.isascii() or not value.isdigit():
        return None
    if len(value.lstrip("0")) > len(str(MAX_HEADER_SECONDS)):
        return MAX_HEADER_SECONDS
    return min(int(value), MAX_HEADER_SECONDS)


def retry_after(headers: Mapping[str, str]) -> Optional[float]:
    """
    Seconds to wait from a ``Retry-After`` header.

    Only the delay-seconds form is honored; HTTP-date values are ignored.
    """
    seconds = _parse_uint(headers.get(RETRY_AFTER_HEADER))
    if seconds is None:
        return None
    return float(seconds)


def ratelimit_reset(
    headers: Mapping[str, str],
    now_monotonic: float,
    now_wall: float,
) -> Optional[float]:
    """
    Monotonic deadline at which an exhausted quota is replenished.

    Applies only when ``X-RateLimit-Remaining`` is exactly 0 and
    ``X-RateLimit-Reset`` holds a Unix timestamp. A reset time already in
    the past maps to ``now_monotonic``.

    Args:
        headers: Response headers (case-insensitive mapping)
        now_monotonic: Current ``time.monotonic()`` value
        now_wall: Current ``time.time()`` value

    Returns:
        Deadline on the monotonic clock, or None
    """
    remaining = _parse_uint(headers.get(REMAINING_HEADER))
    if remaining != 0:
        return None
    reset_at = _parse_uint(headers.get(RESET_HEADER))
    if reset_at is None:
        return None
    return now_monotonic + max(0.0, reset_at - now_wall)


def parse_status(headers: Mapping[str, str]) -> Optional[RateLimitStatus]:
    """
    Extract rate limit info from response headers.

    Returns:
        RateLimitStatus, or None if the response carries no quota headers
    """
    remaining = _parse_uint(headers.get(REMAINING_HEADER))
    if remaining is None:
        return None
    return RateLimitStatus(
        remaining=remaining,
        limit=_parse_uint(headers.get(LIMIT_HEADER)),
        reset_at=_parse_uint(headers.get(RESET_HEADER)),
        resource=headers.get(RESOURCE_HEADER),
    )


def rate_limit_signals(
    response: requests.Response,
    now_monotonic: Optional[float] = None,
    now_wall: Optional[float] = None,
) -> List[RateLimitSignal]:
    """
    Collect resumption signals from a response, in application order.

    ``Retry-After`` comes first and the quota reset second, so a caller that
    applies them in sequence lets the quota reset win when both are present.
    """
    if now_monotonic is None:
        now_monotonic = time.monotonic()
    if now_wall is None:
        now_wall = time.time()

    signals = []
    delay = retry_after(response.headers)
    if delay is not None:
        signals.append(RateLimitSignal(SignalKind.RETRY_AFTER, now_monotonic + delay))
    reset = ratelimit_reset(response.headers, now_monotonic, now_wall)
    if reset is not None:
        signals.append(RateLimitSignal(SignalKind.RATELIMIT_RESET, reset))
    return signals
