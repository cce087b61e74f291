"""Stage 1: gather candidates from every configured source."""

from __future__ import annotations

import logging

from listradar.arxiv_source import collect_arxiv
from listradar.blog_source import collect_blogs
from listradar.config import RadarConfig
from listradar.github_source import collect_github
from listradar.models import Candidate
from listradar.web_source import collect_web_pages

logger = logging.getLogger(__name__)


def collect_all(config: RadarConfig) -> list[Candidate]:
    """Concatenate github → arxiv → blogs → web_pages results (sections absent are skipped)."""
    sources = config.sources
    candidates: list[Candidate] = []

    if sources.github:
        candidates.extend(collect_github(config))
    if sources.arxiv:
        candidates.extend(collect_arxiv(config))
    if sources.blogs:
        candidates.extend(collect_blogs(config))
    if sources.web_pages:
        candidates.extend(collect_web_pages(config))

    logger.debug("Collected %d candidates across all sources", len(candidates))
    return candidates
