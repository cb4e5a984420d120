"""
Crawler for GitHub and OSS Insight data.

This package provides a rate-limit aware crawler that:
- Fetches repositories, users, READMEs and stargazers from the GitHub REST API
- Fetches trending repositories from OSS Insight
- Waits out rate limits and backs off exponentially on failures
- Prints every record as one JSON line
"""

__version__ = "0.1.0"

from oss_crawler.timer import BackoffTimer
from oss_crawler.fetcher import FetchState, ResilientFetcher
from oss_crawler.github import GitHubClient
from oss_crawler.ossinsight import OssInsightClient, Period

__all__ = [
    "BackoffTimer",
    "FetchState",
    "ResilientFetcher",
    "GitHubClient",
    "OssInsightClient",
    "Period",
]
