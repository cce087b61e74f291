"""Unit tests for the collection stage."""

from unittest.mock import patch

from listradar.collect import collect_all
from listradar.config import RadarConfig
from listradar.models import Candidate


def _make(source: str) -> list[Candidate]:
    return [Candidate(url=f"https://example.com/{source}", title=source, source=source)]


class TestCollectAll:
    def test_concatenates_in_source_order(self) -> None:
        config = RadarConfig.model_validate(
            {
                "description": "t",
                "sources": {
                    "web_pages": {"urls": ["https://example.com/news"]},
                    "github": {"topics": ["x"]},
                    "blogs": {"feeds": ["https://example.com/feed"]},
                    "arxiv": {"categories": ["cs.CR"], "keywords": ["x"]},
                },
            }
        )
        with (
            patch("listradar.collect.collect_github", return_value=_make("github")),
            patch("listradar.collect.collect_arxiv", return_value=_make("arxiv")),
            patch("listradar.collect.collect_blogs", return_value=_make("blog")),
            patch("listradar.collect.collect_web_pages", return_value=_make("web_page")),
        ):
            candidates = collect_all(config)

        assert [c.source for c in candidates] == ["github", "arxiv", "blog", "web_page"]

    def test_skips_unconfigured_sections(self) -> None:
        config = RadarConfig.model_validate({"description": "t", "sources": {"github": {"topics": ["x"]}}})
        with (
            patch("listradar.collect.collect_github", return_value=_make("github")),
            patch("listradar.collect.collect_arxiv") as arxiv,
            patch("listradar.collect.collect_blogs") as blogs,
            patch("listradar.collect.collect_web_pages") as web,
        ):
            candidates = collect_all(config)

        assert len(candidates) == 1
        arxiv.assert_not_called()
        blogs.assert_not_called()
        web.assert_not_called()
