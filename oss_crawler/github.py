"""
GitHub REST API client.

Point lookups for repositories, READMEs and users (by name or by numeric id)
and paginated stargazer listings.
"""

from typing import Any, Dict, Iterator, List, Optional

import requests

from oss_crawler.client import ApiClient
from oss_crawler.config import CrawlerConfig
from oss_crawler.exceptions import ResponseDecodeError


MEDIA_TYPE_DEFAULT = "application/vnd.github+json"
MEDIA_TYPE_STAR = "application/vnd.github.star+json"  # adds starred_at

PER_PAGE = 100  # GitHub API max


class GitHubClient(ApiClient):
    """
    GitHub REST API client.

    Supports:
    - Repository, README and user lookups by name or id
    - Stargazer listing with starred_at timestamps
    - Optional bearer token (unauthenticated requests get a lower limit)
    """

    BASE_URL = "https://api.github.com"

    def __init__(
        self,
        token: Optional[str] = None,
        config: Optional[CrawlerConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize GitHub client.

        Args:
            token: GitHub personal access token (falls back to config.github_token)
            config: CrawlerConfig instance (optional)
            session: requests.Session to use (optional)
        """
        super().__init__(config=config, session=session)
        self.token = token or self.config.github_token
        if self.token:
            self.session.headers.update({"Authorization": f"Bearer {self.token}"})

    def repos_stargazers(self, full_name: str, page: int) -> List[Dict[str, Any]]:
        """
        Fetch one page of stargazers.

        Args:
            full_name: Repository full name (owner/repo)
            page: Page number (1-indexed)

        Returns:
            List of stargazer records; empty past the last page
        """
        stargazers = self._get_json(
            f"/repos/{full_name}/stargazers",
            accept=MEDIA_TYPE_STAR,
            params={"per_page": PER_PAGE, "page": page},
        )
        if not isinstance(stargazers, list):
            raise ResponseDecodeError(
                f"{self.BASE_URL}/repos/{full_name}/stargazers?page={page}",
                f"expected a JSON array, got {type(stargazers).__name__}",
            )
        return stargazers

    def iter_stargazers(self, full_name: str, start_page: int = 1) -> Iterator[Dict[str, Any]]:
        """
        Iterate over all stargazers, page by page.

        Stops at the first empty page.

        Yields:
            Stargazer records in page order
        """
        page = start_page
        while True:
            stargazers = self.repos_stargazers(full_name, page)
            if not stargazers:
                break
            yield from stargazers
            page += 1

    def _get(self, path: str) -> Any:
        return self._get_json(path, accept=MEDIA_TYPE_DEFAULT)

    def repo(self, full_name: str) -> Any:
        return self._get(f"/repos/{full_name}")

    def repo_by_id(self, repo_id: int) -> Any:
        return self._get(f"/repositories/{repo_id}")

    def readme(self, full_name: str) -> Any:
        """README metadata with base64 ``content``, as GitHub returns it."""
        return self._get(f"/repos/{full_name}/readme")

    def readme_by_id(self, repo_id: int) -> Any:
        return self._get(f"/repositories/{repo_id}/readme")

    def user(self, login: str) -> Any:
        return self._get(f"/users/{login}")

    def user_by_id(self, user_id: int) -> Any:
        return self._get(f"/user/{user_id}")
