"""
OSS Insight API client.

Trending repositories per period and language.
"""

from enum import Enum
from typing import Any, Union

from oss_crawler.client import ApiClient


MEDIA_TYPE = "application/json"


class Period(str, Enum):
    """Time window for trending repositories."""
    PAST_24_HOURS = "past_24_hours"
    PAST_WEEK = "past_week"
    PAST_MONTH = "past_month"
    PAST_3_MONTHS = "past_3_months"


class OssInsightClient(ApiClient):
    """OSS Insight public API client (no credential)."""

    BASE_URL = "https://api.ossinsight.io/v1"

    def trends(self, period: Union[Period, str], language: str) -> Any:
        """
        Fetch trending repositories.

        Args:
            period: Period or its string value (e.g. "past_week")
            language: Language filter as OSS Insight names it (e.g. "Python", "All")

        Returns:
            Decoded JSON response
        """
        period = Period(period)
        return self._get_json(
            "/trends/repos/",
            accept=MEDIA_TYPE,
            params={"period": period.value, "language": language},
        )
