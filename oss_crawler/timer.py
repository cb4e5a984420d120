"""
Exponential backoff timer.

Tracks the earliest instant at which the next request may be sent, and the
delay to add after the next anonymous failure.
"""

import logging
import math
import threading
import time
from typing import Optional


logger = logging.getLogger(__name__)

DEFAULT_MIN_DELAY = 60.0
DEFAULT_MAX_DELAY = 3600.0

# Longest single time.sleep() call; longer waits are slept in chunks.
MAX_SLEEP_CHUNK = threading.TIMEOUT_MAX


class BackoffTimer:
    """
    Resumption deadline with exponential backoff and a ceiling.

    Deadlines are ``time.monotonic()`` instants. The server's own schedule
    (``set_deadline``) always resets the delay back to ``min_delay``;
    ``backoff`` pushes the deadline out and doubles the delay up to
    ``max_delay``.

    Owned by exactly one fetcher; not thread-safe.
    """

    def __init__(
        self,
        deadline: Optional[float] = None,
        min_delay: float = DEFAULT_MIN_DELAY,
        max_delay: float = DEFAULT_MAX_DELAY,
    ):
        """
        Initialize backoff timer.

        Args:
            deadline: Initial deadline (monotonic seconds, defaults to now)
            min_delay: Delay after the first failure, in seconds
            max_delay: Upper bound for the delay, in seconds
        """
        if not (math.isfinite(min_delay) and math.isfinite(max_delay)):
            raise ValueError(
                f"delay bounds must be finite, got min_delay={min_delay}, max_delay={max_delay}"
            )
        if min_delay <= 0:
            raise ValueError(f"min_delay must be positive, got {min_delay}")
        if min_delay > max_delay:
            raise ValueError(
                f"min_delay ({min_delay}) must not exceed max_delay ({max_delay})"
            )
        self._deadline = time.monotonic() if deadline is None else deadline
        self._min_delay = float(min_delay)
        self._max_delay = float(max_delay)
        self._delay = self._min_delay

    @property
    def deadline(self) -> float:
        return self._deadline

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def min_delay(self) -> float:
        return self._min_delay

    @property
    def max_delay(self) -> float:
        return self._max_delay

    def remaining(self) -> float:
        """Seconds left until the deadline (0 if already reached)."""
        return max(0.0, self._deadline - time.monotonic())

    def wait(self) -> float:
        """
        Block until the deadline is reached.

        Returns:
            Number of seconds slept (0 if the deadline already passed)
        """
        total = remaining = self.remaining()
        if remaining > 0:
            logger.debug(f"Waiting {remaining:.1f}s before next request")
        while remaining > 0:
            time.sleep(min(remaining, MAX_SLEEP_CHUNK))
            remaining = self.remaining()
        return total

    def set_deadline(self, new_deadline: float) -> None:
        """Adopt a resumption time dictated by the server and reset the delay."""
        self._deadline = new_deadline
        self._delay = self._min_delay

    def backoff(self) -> None:
        """Push the deadline out by the current delay, then double the delay."""
        self._deadline += self._delay
        self._delay = min(2 * self._delay, self._max_delay)

    def __repr__(self) -> str:
        return (
            f"BackoffTimer(remaining={self.remaining():.1f}s, delay={self._delay}s, "
            f"min_delay={self._min_delay}s, max_delay={self._max_delay}s)"
        )
