"""Web page source: fetch a page, reduce it to text, let the LLM pick out article links."""

from __future__ import annotations

import json
import logging
from urllib.parse import urljoin, urlparse

import requests
from lxml import etree
from lxml import html as lxml_html

from listradar.config import RadarConfig
from listradar.keywords import matches_any_keyword
from listradar.llm import ChatClient, LLMClient, extract_balanced
from listradar.models import Candidate, CandidateMetadata
from listradar.settle import settle_all

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 1000
MAX_HTML_LENGTH = 15_000
_MAX_TOKENS = 4096
_USER_AGENT = "listradar/0.1 (link extractor)"
_BOILERPLATE_TAGS = ("script", "style", "nav", "footer", "header")

SYSTEM_PROMPT = """\
You are an article link extractor. Given the cleaned text of a web page, extract all \
article or blog post links you can find.

Respond with ONLY a valid JSON array of objects, each with "title" and "url" fields:
[{"title": "Article Title", "url": "https://example.com/article"}]

If no article links are found, respond with an empty array: []"""


def clean_html(html: str) -> str:
    """Strip boilerplate blocks and tags; keep links as ``[text](url)``."""
    if not html.strip():
        return ""
    try:
        root = lxml_html.document_fromstring(html)
    except (etree.ParserError, ValueError):
        return ""

    for el in list(root.iter(*_BOILERPLATE_TAGS)):
        el.drop_tree()

    for anchor in root.xpath("//a[@href]"):
        label = " ".join(anchor.text_content().split())
        for child in list(anchor):
            anchor.remove(child)
        anchor.text = f"[{label}]({anchor.get('href', '').strip()})" if label else ""

    text = " ".join(root.text_content().split())
    return text[:MAX_HTML_LENGTH]


def extract_first_json_array(text: str) -> list[dict[str, str]]:
    """Return the ``{"title", "url"}`` string objects of the first balanced ``[...]``.

    Anything unparseable yields ``[]``.
    """
    span = extract_balanced(text, "[", "]")
    if span is None:
        return []
    try:
        parsed = json.loads(span)
    except json.JSONDecodeError:
        return []
    if not isinstance(parsed, list):
        return []
    return [
        {"title": item["title"], "url": item["url"]}
        for item in parsed
        if isinstance(item, dict)
        and isinstance(item.get("title"), str)
        and isinstance(item.get("url"), str)
    ]


def resolve_url(base: str, href: str) -> str:
    try:
        return urljoin(base, href)
    except ValueError:
        return href


def _extract_links(page_url: str, model: str, llm: ChatClient) -> list[dict[str, str]]:
    logger.info("Fetching web page: %s", page_url)
    response = requests.get(page_url, timeout=30, headers={"User-Agent": _USER_AGENT})
    response.raise_for_status()
    cleaned = clean_html(response.text)

    logger.info("Extracting links from %s (%d chars)", page_url, len(cleaned))
    text = llm.complete(
        model=model,
        system=SYSTEM_PROMPT,
        user=f"Extract all article/blog post links from this web page content:\n\n{cleaned}",
        max_tokens=_MAX_TOKENS,
    )
    return [
        {"title": link["title"], "url": resolve_url(page_url, link["url"])}
        for link in extract_first_json_array(text)
        if link["url"].strip()
    ]


def collect_web_pages(config: RadarConfig, client: ChatClient | None = None) -> list[Candidate]:
    """Article links found on every configured page, fetched concurrently. Never raises."""
    pages = config.sources.web_pages
    if pages is None:
        return []

    try:
        llm = client if client is not None else LLMClient.from_env()
    except Exception as exc:
        logger.warning("Web page collection disabled: %s", exc)
        return []

    keywords = pages.keywords or []
    candidates: list[Candidate] = []

    def _run(page_url: str) -> list[dict[str, str]]:
        return _extract_links(page_url, pages.model, llm)

    for result in settle_all(_run, pages.urls):
        if not result.ok:
            logger.warning("Failed to process web page %s: %s", result.arg, result.error)
            continue

        page_name = urlparse(result.arg).hostname
        for link in result.value or []:
            title, url = link["title"].strip(), link["url"].strip()
            if not title or not url:
                continue
            if keywords and not matches_any_keyword(f"{title} {url}", keywords):
                continue
            candidates.append(
                Candidate(
                    url=url,
                    title=title,
                    description=title[:MAX_DESCRIPTION_LENGTH],
                    source="web_page",
                    metadata=CandidateMetadata(page_name=page_name),
                )
            )

    logger.info("Web pages: %d candidates", len(candidates))
    return candidates
