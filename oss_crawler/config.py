"""
Crawler configuration.

Values come from environment variables, then CLI options override them.
"""

import math
import os
from dataclasses import dataclass
from typing import Optional

from oss_crawler.fetcher import DEFAULT_TIMEOUT
from oss_crawler.timer import DEFAULT_MAX_DELAY, DEFAULT_MIN_DELAY


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None


def _env_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


@dataclass
class CrawlerConfig:
    """Configuration for the crawler."""
    github_token: Optional[str] = None
    min_delay: float = DEFAULT_MIN_DELAY  # seconds
    max_delay: float = DEFAULT_MAX_DELAY  # seconds
    timeout: float = DEFAULT_TIMEOUT  # seconds, per attempt
    max_attempts: Optional[int] = None  # None retries until success
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> "CrawlerConfig":
        """
        Build configuration from environment variables.

        Reads GITHUB_TOKEN and the OSS_CRAWLER_* variables.
        """
        return cls(
            github_token=os.getenv("GITHUB_TOKEN") or None,
            min_delay=_env_float("OSS_CRAWLER_MIN_DELAY", DEFAULT_MIN_DELAY),
            max_delay=_env_float("OSS_CRAWLER_MAX_DELAY", DEFAULT_MAX_DELAY),
            timeout=_env_float("OSS_CRAWLER_TIMEOUT", DEFAULT_TIMEOUT),
            max_attempts=_env_int("OSS_CRAWLER_MAX_ATTEMPTS"),
            log_level=os.getenv("OSS_CRAWLER_LOG_LEVEL", "INFO"),
            log_file=os.getenv("OSS_CRAWLER_LOG_FILE") or None,
        )

    def validate(self) -> "CrawlerConfig":
        """Check that the bounds are consistent; returns self."""
        for name in ("min_delay", "max_delay", "timeout"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value}")
        if self.min_delay <= 0:
            raise ValueError(f"min_delay must be positive, got {self.min_delay}")
        if self.min_delay > self.max_delay:
            raise ValueError(
                f"min_delay ({self.min_delay}) must not exceed max_delay ({self.max_delay})"
            )
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        return self
