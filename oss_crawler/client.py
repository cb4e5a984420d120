"""
Shared plumbing for the service clients.

Each client owns one session, one backoff timer and one fetcher, so backoff
state carries over between every call made through the same client.
"""

import logging
from typing import Any, Dict, Optional

import requests

from oss_crawler import __version__
from oss_crawler.config import CrawlerConfig
from oss_crawler.exceptions import ResponseDecodeError
from oss_crawler.fetcher import ResilientFetcher
from oss_crawler.timer import BackoffTimer


logger = logging.getLogger(__name__)

USER_AGENT = f"oss-crawler/{__version__}"


class ApiClient:
    """Base class for a rate-limited JSON API."""

    BASE_URL = ""

    def __init__(
        self,
        config: Optional[CrawlerConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize API client.

        Args:
            config: CrawlerConfig with backoff bounds and timeouts
            session: requests.Session to use (a new one if None)
        """
        self.config = config or CrawlerConfig()
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})
        self.timer = BackoffTimer(
            min_delay=self.config.min_delay,
            max_delay=self.config.max_delay,
        )
        self.fetcher = ResilientFetcher(
            self.session,
            self.timer,
            timeout=self.config.timeout,
            max_attempts=self.config.max_attempts,
        )

    def _get_json(
        self,
        path: str,
        accept: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        GET ``BASE_URL + path`` until it succeeds and decode the JSON body.

        Raises:
            ResponseDecodeError: If the 200 body is not valid JSON
        """
        request = requests.Request(
            "GET",
            f"{self.BASE_URL}{path}",
            params=params,
            headers={"Accept": accept},
        )
        prepared = self.session.prepare_request(request)
        logger.debug(f"GET {prepared.url}")

        response = self.fetcher.fetch(prepared)
        try:
            return response.json()
        except ValueError as e:
            raise ResponseDecodeError(prepared.url, str(e)) from e

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
