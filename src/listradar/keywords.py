"""Keyword pre-filter: cheap local relevance check before any LLM spend."""

from __future__ import annotations

import logging

from listradar.config import RadarConfig
from listradar.models import Candidate

logger = logging.getLogger(__name__)


def get_all_keywords(config: RadarConfig) -> list[str]:
    """Every keyword configured across all source sections, lowercased and de-duplicated."""
    sources = config.sources
    keywords: list[str] = []

    if sources.github:
        keywords.extend(sources.github.topics)
    if sources.arxiv:
        keywords.extend(sources.arxiv.keywords)
    if sources.blogs and sources.blogs.keywords:
        keywords.extend(sources.blogs.keywords)
    if sources.web_pages and sources.web_pages.keywords:
        keywords.extend(sources.web_pages.keywords)

    # dict keeps first-seen order
    return list(dict.fromkeys(kw.lower() for kw in keywords if kw))


def matches_any_keyword(text: str, keywords: list[str]) -> bool:
    """Substring match, not word-boundary: "go" matches "gopher"."""
    text_lower = text.lower()
    return any(kw.lower() in text_lower for kw in keywords)


def _search_text(candidate: Candidate) -> str:
    topics = " ".join(candidate.metadata.topics or [])
    return f"{candidate.title} {candidate.description} {topics}"


def filter_candidates(candidates: list[Candidate], config: RadarConfig) -> list[Candidate]:
    """Keep candidates mentioning at least one configured keyword (order preserved).

    With no keywords configured at all, every candidate passes.
    """
    keywords = get_all_keywords(config)

    if not keywords:
        logger.info("No keywords configured, passing all candidates through")
        return list(candidates)

    filtered = [c for c in candidates if matches_any_keyword(_search_text(c), keywords)]
    logger.info("Keyword filter: %d → %d candidates", len(candidates), len(filtered))
    return filtered
