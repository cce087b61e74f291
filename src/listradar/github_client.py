"""Minimal GitHub REST client: repository search and issue list/create."""

from __future__ import annotations

import logging
from typing import Any

import requests

from listradar import config

logger = logging.getLogger(__name__)

_ACCEPT = "application/vnd.github+json"
_API_VERSION = "2022-11-28"
_MAX_ISSUE_PAGES = 10


class GitHubClientError(Exception):
    """Raised when the GitHub API returns an unexpected response."""


class GitHubClient:
    """Thin wrapper around the handful of REST endpoints the radar needs."""

    def __init__(
        self,
        token: str,
        repository: str = "",
        api_url: str = "https://api.github.com",
    ) -> None:
        self._repository = repository
        self._api_url = api_url.rstrip("/")
        self._session = requests.Session()
        self._session.headers.update(
            {"Accept": _ACCEPT, "X-GitHub-Api-Version": _API_VERSION}
        )
        if token:
            self._session.headers.update({"Authorization": f"Bearer {token}"})
        else:
            logger.warning("GITHUB_TOKEN not set — requests are unauthenticated.")

    @classmethod
    def from_env(cls) -> GitHubClient:
        return cls(
            token=config.GITHUB_TOKEN,
            repository=config.GITHUB_REPOSITORY,
            api_url=config.GITHUB_API_URL,
        )

    # ── public ──────────────────────────────────────────────────────────

    def search_repositories(
        self, query: str, per_page: int = 100
    ) -> list[dict[str, Any]]:
        """Single page of ``GET /search/repositories`` sorted by stars, descending."""
        params: dict[str, Any] = {
            "q": query,
            "sort": "stars",
            "order": "desc",
            "per_page": per_page,
        }
        data = self._request("GET", "/search/repositories", params=params)
        items: list[dict[str, Any]] = data.get("items", []) if isinstance(data, dict) else []
        logger.info("GitHub search returned %d repositories", len(items))
        return items

    def list_issues(self, labels: list[str]) -> list[dict[str, Any]]:
        """Open issues carrying all *labels* (pull requests excluded)."""
        issues: list[dict[str, Any]] = []
        for page in range(1, _MAX_ISSUE_PAGES + 1):
            params: dict[str, Any] = {
                "state": "open",
                "labels": ",".join(labels),
                "per_page": 100,
                "page": page,
            }
            batch = self._request("GET", f"{self._repo_path()}/issues", params=params)
            if not isinstance(batch, list) or not batch:
                break
            issues.extend(i for i in batch if "pull_request" not in i)
            if len(batch) < 100:
                break
        return issues

    def create_issue(self, title: str, body: str, labels: list[str]) -> dict[str, Any]:
        payload = {"title": title, "body": body, "labels": labels}
        data = self._request("POST", f"{self._repo_path()}/issues", json=payload)
        if not isinstance(data, dict):
            raise GitHubClientError("GitHub API returned a non-object issue")
        return data

    # ── private ─────────────────────────────────────────────────────────

    def _repo_path(self) -> str:
        if "/" not in self._repository:
            raise GitHubClientError(
                f"GITHUB_REPOSITORY must be 'owner/repo', got {self._repository!r}"
            )
        return f"/repos/{self._repository}"

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        resp = self._session.request(method, f"{self._api_url}{path}", timeout=30, **kwargs)
        if not 200 <= resp.status_code < 300:
            raise GitHubClientError(
                f"GitHub API returned {resp.status_code}: {resp.text[:500]}"
            )
        return resp.json()
