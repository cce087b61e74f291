"""Unit tests for the GitHub search source and REST client."""

from datetime import date
from typing import Any
from unittest.mock import MagicMock

import pytest

from listradar.config import RadarConfig
from listradar.github_client import GitHubClient, GitHubClientError
from listradar.github_source import build_search_query, collect_github, created_after_date


def _config(**github: Any) -> RadarConfig:
    section = {"topics": ["webgpu", "zk"], **github}
    return RadarConfig.model_validate({"description": "t", "sources": {"github": section}})


def _response(status: int, payload: Any) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload
    resp.text = str(payload)
    return resp


class TestCreatedAfterDate:
    def test_days_ago(self) -> None:
        assert created_after_date("30d", today=date(2025, 3, 31)) == "2025-03-01"

    def test_zero_days(self) -> None:
        assert created_after_date("0d", today=date(2025, 1, 1)) == "2025-01-01"

    def test_invalid(self) -> None:
        with pytest.raises(ValueError, match="Invalid date spec"):
            created_after_date("soon")


class TestBuildSearchQuery:
    def test_topics_and_date(self) -> None:
        config = _config()
        query = build_search_query(["webgpu", "zk"], config, today=date(2025, 3, 31))
        assert query == "topic:webgpu topic:zk created:>=2025-03-01"

    def test_languages_and_stars(self) -> None:
        config = _config(languages=["Rust", "Go"], min_stars=10, created_after="7d")
        query = build_search_query(["webgpu"], config, today=date(2025, 1, 8))
        assert query == "topic:webgpu language:Rust language:Go stars:>=10 created:>=2025-01-01"


class TestCollectGithub:
    def test_maps_repositories(self) -> None:
        client = MagicMock()
        client.search_repositories.return_value = [
            {
                "html_url": "https://github.com/a/b",
                "full_name": "a/b",
                "description": "x" * 2000,
                "stargazers_count": 12,
                "language": "Rust",
                "topics": ["webgpu"],
            },
            {
                "html_url": "https://github.com/c/d",
                "full_name": "c/d",
                "description": None,
                "stargazers_count": 0,
                "language": None,
            },
        ]

        candidates = collect_github(_config(), client)

        assert [c.url for c in candidates] == ["https://github.com/a/b", "https://github.com/c/d"]
        first, second = candidates
        assert first.source == "github"
        assert len(first.description) == 1000
        assert first.metadata.stars == 12
        assert first.metadata.language == "Rust"
        assert first.metadata.topics == ["webgpu"]
        assert second.description == ""
        assert second.metadata.stars == 0
        assert second.metadata.language is None

    def test_search_failure_returns_empty(self) -> None:
        client = MagicMock()
        client.search_repositories.side_effect = GitHubClientError("422")
        assert collect_github(_config(), client) == []

    def test_skips_malformed_entries(self) -> None:
        client = MagicMock()
        client.search_repositories.return_value = [{"full_name": "no/url"}, {"html_url": "https://github.com/ok/ok"}]
        assert [c.url for c in collect_github(_config(), client)] == ["https://github.com/ok/ok"]

    def test_absent_section(self) -> None:
        config = RadarConfig.model_validate(
            {"description": "t", "sources": {"arxiv": {"categories": ["cs.CR"], "keywords": ["gpu"]}}}
        )
        client = MagicMock()
        assert collect_github(config, client) == []
        client.search_repositories.assert_not_called()


class TestGitHubClient:
    def _client(self, *responses: MagicMock) -> GitHubClient:
        client = GitHubClient(token="t", repository="o/r")
        client._session = MagicMock()
        client._session.request.side_effect = list(responses)
        return client

    def test_search_repositories(self) -> None:
        client = self._client(_response(200, {"items": [{"html_url": "u"}]}))

        assert client.search_repositories("topic:x") == [{"html_url": "u"}]
        method, url = client._session.request.call_args.args
        assert (method, url) == ("GET", "https://api.github.com/search/repositories")
        assert client._session.request.call_args.kwargs["params"]["q"] == "topic:x"

    def test_list_issues_excludes_pull_requests(self) -> None:
        client = self._client(
            _response(200, [{"number": 1, "body": "a"}, {"number": 2, "pull_request": {}}])
        )
        assert client.list_issues(["radar", "needs-review"]) == [{"number": 1, "body": "a"}]
        params = client._session.request.call_args.kwargs["params"]
        assert params["labels"] == "radar,needs-review"
        assert params["state"] == "open"

    def test_list_issues_follows_pages(self) -> None:
        full_page = [{"number": i} for i in range(100)]
        client = self._client(_response(200, full_page), _response(200, [{"number": 100}]))
        assert len(client.list_issues(["radar"])) == 101

    def test_create_issue(self) -> None:
        client = self._client(_response(201, {"number": 7, "html_url": "https://github.com/o/r/issues/7"}))

        created = client.create_issue("title", "body", ["radar"])

        assert created["number"] == 7
        assert client._session.request.call_args.kwargs["json"] == {
            "title": "title",
            "body": "body",
            "labels": ["radar"],
        }

    def test_error_status_raises(self) -> None:
        client = self._client(_response(403, {"message": "Forbidden"}))
        with pytest.raises(GitHubClientError, match="403"):
            client.create_issue("t", "b", [])

    def test_repository_must_be_owner_slash_repo(self) -> None:
        client = GitHubClient(token="t", repository="")
        with pytest.raises(GitHubClientError, match="owner/repo"):
            client.list_issues(["radar"])
