"""Unit tests for the keyword pre-filter."""

from typing import Any

from listradar.config import RadarConfig
from listradar.keywords import filter_candidates, get_all_keywords, matches_any_keyword
from listradar.models import Candidate, CandidateMetadata


def _config(sources: dict[str, Any]) -> RadarConfig:
    return RadarConfig.model_validate({"description": "test", "sources": sources})


def _make(
    title: str,
    description: str = "",
    topics: list[str] | None = None,
    url: str | None = None,
) -> Candidate:
    return Candidate(
        url=url or f"https://example.com/{title.replace(' ', '-')}",
        title=title,
        description=description,
        source="github",
        metadata=CandidateMetadata(topics=topics),
    )


class TestGetAllKeywords:
    def test_collects_every_section_lowercased_and_deduplicated(self) -> None:
        config = _config(
            {
                "github": {"topics": ["WebGPU", "zk"]},
                "arxiv": {"categories": ["cs.CR"], "keywords": ["GPU", "webgpu"]},
                "blogs": {"feeds": ["https://example.com/feed"], "keywords": ["Rust"]},
                "web_pages": {"urls": ["https://example.com/"], "keywords": ["ZK"]},
            }
        )
        assert get_all_keywords(config) == ["webgpu", "zk", "gpu", "rust"]

    def test_sections_without_keywords(self) -> None:
        config = _config({"blogs": {"feeds": ["https://example.com/feed"]}})
        assert get_all_keywords(config) == []


class TestMatchesAnyKeyword:
    def test_case_insensitive(self) -> None:
        assert matches_any_keyword("GPU Acceleration", ["gpu"])

    def test_substring_not_word_boundary(self) -> None:
        assert matches_any_keyword("a gopher library", ["go"])

    def test_no_match(self) -> None:
        assert not matches_any_keyword("database tuning", ["gpu", "zk"])


class TestFilterCandidates:
    def test_no_keywords_is_identity(self) -> None:
        config = _config({"blogs": {"feeds": ["https://example.com/feed"]}})
        items = [_make("b"), _make("a"), _make("c")]
        assert filter_candidates(items, config) == items

    def test_keeps_matches_in_order(self) -> None:
        config = _config({"github": {"topics": ["gpu"]}})
        items = [
            _make("fast GPU msm"),
            _make("unrelated"),
            _make("other", description="runs on the gpu"),
            _make("tagged", topics=["cuda", "GPU"]),
        ]
        kept = filter_candidates(items, config)
        assert [c.title for c in kept] == ["fast GPU msm", "other", "tagged"]

    def test_missing_topics_do_not_error(self) -> None:
        config = _config({"github": {"topics": ["gpu"]}})
        assert filter_candidates([_make("plain", topics=None)], config) == []

    def test_empty(self) -> None:
        config = _config({"github": {"topics": ["gpu"]}})
        assert filter_candidates([], config) == []
