"""
Resilient fetcher.

Sends a prepared request until the server answers 200, honoring rate limit
headers and backing off exponentially on every other outcome.
"""

import logging
from enum import Enum
from typing import Optional

import requests

from oss_crawler.exceptions import RequestNotReplayable, RetryBudgetExceeded
from oss_crawler.rate_limiter import parse_status, rate_limit_signals
from oss_crawler.timer import BackoffTimer


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
BODY_LOG_LIMIT = 500


class FetchState(str, Enum):
    """States of the fetch loop."""
    WAITING = "waiting"    # blocked on the backoff deadline
    SENT = "sent"          # request on the wire
    SUCCESS = "success"    # 200 received, loop finished
    RETRYING = "retrying"  # attempt failed, deadline pushed out


def _ensure_replayable(prepared: requests.PreparedRequest) -> None:
    body = prepared.body
    if body is None or isinstance(body, (str, bytes, bytearray)):
        return
    raise RequestNotReplayable(
        f"{prepared.method} {prepared.url} has a streaming body "
        f"({type(body).__name__}) and cannot be retried"
    )


def describe_response(response: requests.Response) -> str:
    """One-line description of a response for the logs."""
    body = response.text or ""
    if len(body) > BODY_LOG_LIMIT:
        body = body[:BODY_LOG_LIMIT] + "..."
    return (
        f"{response.status_code} {response.reason} from {response.url} "
        f"headers={dict(response.headers)} body={body!r}"
    )


class ResilientFetcher:
    """
    Retry loop around a requests session.

    Every attempt waits on the shared BackoffTimer first. Rate limit headers
    reprogram the timer; any non-200 response or transport error grows the
    backoff. With ``max_attempts=None`` (the default) the loop only ends on
    success: a persistently failing endpoint blocks the crawl until the
    process is stopped.
    """

    def __init__(
        self,
        session: requests.Session,
        timer: BackoffTimer,
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: Optional[int] = None,
    ):
        """
        Initialize fetcher.

        Args:
            session: requests.Session used to send requests
            timer: BackoffTimer owned by this fetcher
            timeout: Per-attempt timeout in seconds
            max_attempts: Optional attempt budget (None retries forever)
        """
        if max_attempts is not None and max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.session = session
        self.timer = timer
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.state = FetchState.WAITING
        self.attempts = 0  # attempts made by the last fetch() call

    def fetch(self, prepared: requests.PreparedRequest) -> requests.Response:
        """
        Send ``prepared`` until it succeeds.

        Args:
            prepared: Request to send; a fresh copy is used for each attempt

        Returns:
            The 200 response

        Raises:
            RequestNotReplayable: If the request body cannot be resent
            RetryBudgetExceeded: If ``max_attempts`` is set and exhausted
        """
        _ensure_replayable(prepared)
        self.attempts = 0
        last_status = None

        while True:
            if self.max_attempts is not None and self.attempts >= self.max_attempts:
                raise RetryBudgetExceeded(prepared.url, self.attempts, last_status)

            request = prepared.copy()
            self.state = FetchState.WAITING
            self.timer.wait()

            self.state = FetchState.SENT
            self.attempts += 1
            try:
                response = self.session.send(request, timeout=self.timeout)
            except requests.RequestException as e:
                last_status = None
                self.timer.backoff()
                self.state = FetchState.RETRYING
                logger.warning(
                    f"Request to {prepared.url} failed on attempt {self.attempts}: "
                    f"{type(e).__name__}: {e}. Retrying in {self.timer.remaining():.0f}s"
                )
                continue

            self._apply_rate_limit(response)

            if response.status_code == requests.codes.ok:
                self.state = FetchState.SUCCESS
                return response

            last_status = response.status_code
            self.timer.backoff()
            self.state = FetchState.RETRYING
            logger.warning(
                f"Attempt {self.attempts} got {describe_response(response)}. "
                f"Retrying in {self.timer.remaining():.0f}s"
            )

    def _apply_rate_limit(self, response: requests.Response) -> None:
        """Reprogram the timer from the response's rate limit headers."""
        status = parse_status(response.headers)
        if status is not None:
            logger.debug(
                f"Rate limit {status.resource or 'default'}: "
                f"{status.remaining}/{status.limit} remaining, reset at {status.reset_at}"
            )

        for signal in rate_limit_signals(response):
            self.timer.set_deadline(signal.deadline)
            logger.info(
                f"Server requested pause ({signal.kind.value}); "
                f"resuming in {self.timer.remaining():.0f}s"
            )
