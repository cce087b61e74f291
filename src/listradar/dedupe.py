"""Deduplication logic — filter out candidates already present in the curated list."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from pathlib import Path

from listradar.config import RadarConfig
from listradar.models import Candidate

logger = logging.getLogger(__name__)

# Stops at whitespace and at characters that close a markdown link / autolink.
_URL_RE = re.compile(r"https?://[^\s)>\]]+")
_TRAILING_PUNCT = ".,;:!?"

ReadText = Callable[[str], str]


def read_list_file(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


def extract_urls_from_markdown(markdown: str) -> set[str]:
    """Return every http(s) URL in *markdown*, trailing punctuation stripped, lowercased."""
    urls: set[str] = set()
    for match in _URL_RE.findall(markdown):
        cleaned = match.rstrip(_TRAILING_PUNCT).lower()
        if cleaned:
            urls.add(cleaned)
    return urls


def dedupe(
    candidates: list[Candidate],
    config: RadarConfig,
    read_text: ReadText = read_list_file,
) -> list[Candidate]:
    """Return only candidates whose URL is not already in the curated list.

    Fail-open: if the list cannot be read, or yields no URLs, nothing is removed.
    Comparison is an exact match on the lowercased URL; trailing slashes,
    query strings and schemes are not normalised.
    """
    try:
        markdown = read_text(config.list_file)
    except Exception as exc:
        logger.warning(
            "Could not read list file %r, skipping dedup: %s", config.list_file, exc
        )
        return list(candidates)

    existing = extract_urls_from_markdown(markdown)
    if not existing:
        logger.warning("No URLs found in list file %r, skipping dedup", config.list_file)
        return list(candidates)

    new_items = [c for c in candidates if c.key not in existing]
    logger.info(
        "Dedupe: %d total → %d new (filtered %d already listed, %d existing URLs)",
        len(candidates),
        len(new_items),
        len(candidates) - len(new_items),
        len(existing),
    )
    return new_items
