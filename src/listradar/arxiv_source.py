"""arXiv API source (Atom feed over HTTP, parsed with feedparser)."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlencode

import feedparser
import requests

from listradar.config import RadarConfig
from listradar.models import Candidate, CandidateMetadata

logger = logging.getLogger(__name__)

ARXIV_API_URL = "https://export.arxiv.org/api/query"
MAX_DESCRIPTION_LENGTH = 1000
_MAX_RESULTS = 50


def _or_group(clauses: list[str]) -> str:
    return f"({' OR '.join(clauses)})" if len(clauses) > 1 else clauses[0]


def build_arxiv_query(config: RadarConfig) -> str:
    """``(cat:a OR cat:b) AND (all:"k1" OR all:"k2")``."""
    arxiv = config.sources.arxiv
    if arxiv is None:
        raise ValueError("arxiv source is not configured")
    cat_query = _or_group([f"cat:{c}" for c in arxiv.categories])
    kw_query = _or_group([f'all:"{kw}"' for kw in arxiv.keywords])
    return f"{cat_query} AND {kw_query}"


def build_arxiv_url(query: str) -> str:
    params = {
        "search_query": query,
        "start": 0,
        "max_results": _MAX_RESULTS,
        "sortBy": "submittedDate",
        "sortOrder": "descending",
    }
    return f"{ARXIV_API_URL}?{urlencode(params)}"


def _collapse(text: Any) -> str:
    return " ".join(str(text or "").split())


def _parse_entry(entry: Any) -> Candidate | None:
    url = entry.get("id") or entry.get("link")
    title = _collapse(entry.get("title"))
    if not url or not title:
        return None
    authors = [a.get("name", "") for a in entry.get("authors", []) if a.get("name")]
    return Candidate(
        url=str(url),
        title=title,
        description=_collapse(entry.get("summary"))[:MAX_DESCRIPTION_LENGTH],
        source="arxiv",
        metadata=CandidateMetadata(
            authors=authors or None,
            published_at=entry.get("published"),
        ),
    )


def collect_arxiv(config: RadarConfig, session: requests.Session | None = None) -> list[Candidate]:
    """Most recent papers in the configured categories matching any keyword. Never raises."""
    if config.sources.arxiv is None:
        return []

    url = build_arxiv_url(build_arxiv_query(config))
    logger.info("arXiv query URL: %s", url)

    http = session or requests.Session()
    try:
        response = http.get(url, timeout=30)
        if response.status_code != 200:
            logger.warning("arXiv API returned %d", response.status_code)
            return []
        feed = feedparser.parse(response.content)
    except Exception as exc:
        logger.warning("arXiv collection failed: %s", exc)
        return []

    candidates: list[Candidate] = []
    for entry in feed.entries:
        try:
            candidate = _parse_entry(entry)
        except Exception as exc:
            logger.warning("Failed to parse arXiv entry: %s", exc)
            continue
        if candidate is not None:
            candidates.append(candidate)

    logger.info("arXiv: %d candidates", len(candidates))
    return candidates
