"""Blog RSS/Atom feed source."""

from __future__ import annotations

import logging
from typing import Any

import feedparser
import requests
from lxml import etree
from lxml import html as lxml_html

from listradar.config import RadarConfig
from listradar.keywords import matches_any_keyword
from listradar.models import Candidate, CandidateMetadata
from listradar.settle import settle_all

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 1000
_USER_AGENT = "listradar/0.1 (RSS reader)"


def _fetch_feed(feed_url: str) -> Any:
    """Fetch and parse a single feed; raises on HTTP or parse failure."""
    logger.info("Fetching feed: %s", feed_url)
    response = requests.get(feed_url, timeout=30, headers={"User-Agent": _USER_AGENT})
    response.raise_for_status()
    feed = feedparser.parse(response.content)
    if feed.get("bozo") and not feed.get("entries"):
        raise ValueError(f"unparseable feed: {feed.get('bozo_exception')}")
    return feed


def _snippet(entry: Any) -> str:
    """Plain-text summary of an entry (HTML stripped, whitespace collapsed)."""
    raw = entry.get("summary") or ""
    if not raw and entry.get("content"):
        raw = entry["content"][0].get("value", "")
    if not raw.strip():
        return ""
    try:
        text = lxml_html.fragment_fromstring(raw, create_parent="div").text_content()
    except (etree.ParserError, ValueError):
        return ""
    return " ".join(text.split())


def _parse_entry(entry: Any, feed_name: str | None, keywords: list[str]) -> Candidate | None:
    link = entry.get("link")
    title = (entry.get("title") or "").strip()
    if not link or not title:
        return None

    snippet = _snippet(entry)
    if keywords and not matches_any_keyword(f"{title} {snippet}", keywords):
        return None

    author = entry.get("author")
    return Candidate(
        url=link,
        title=title,
        description=snippet[:MAX_DESCRIPTION_LENGTH],
        source="blog",
        metadata=CandidateMetadata(
            authors=[author] if author else None,
            published_at=entry.get("published") or entry.get("updated"),
            feed_name=feed_name,
        ),
    )


def collect_blogs(config: RadarConfig) -> list[Candidate]:
    """Entries from every configured feed, fetched concurrently. Never raises."""
    blogs = config.sources.blogs
    if blogs is None:
        return []

    keywords = blogs.keywords or []
    candidates: list[Candidate] = []

    for result in settle_all(_fetch_feed, blogs.feeds):
        if not result.ok:
            logger.warning("Failed to fetch feed %s: %s", result.arg, result.error)
            continue

        feed = result.value
        feed_name = feed.get("feed", {}).get("title")
        for entry in feed.get("entries", []):
            try:
                candidate = _parse_entry(entry, feed_name, keywords)
            except Exception as exc:
                logger.warning("Failed to parse entry in %s: %s", result.arg, exc)
                continue
            if candidate is not None:
                candidates.append(candidate)

    logger.info("Blogs: %d candidates", len(candidates))
    return candidates
