"""Render classified candidates as review issues and file them idempotently.

An issue is considered to already exist for a candidate when any open issue
carrying the configured labels mentions the candidate URL in its body
(case-insensitive). The body therefore always includes a ``| **URL** | <url> |``
table row.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Literal, Protocol

from pydantic import BaseModel

from listradar.config import RadarConfig
from listradar.github_client import GitHubClient
from listradar.models import ClassifiedCandidate

logger = logging.getLogger(__name__)

TITLE_PREFIX = "[Radar] "

_BACKTICK_RUN_RE = re.compile(r"`+")


class ExistingIssue(BaseModel):
    title: str = ""
    body: str | None = None


class CreatedIssue(BaseModel):
    number: int
    html_url: str = ""


class IssueClient(Protocol):
    def list_issues(self, labels: list[str]) -> list[ExistingIssue]: ...

    def create_issue(self, title: str, body: str, labels: list[str]) -> CreatedIssue: ...


class GitHubIssueClient:
    """Adapts :class:`GitHubClient` to the :class:`IssueClient` protocol."""

    def __init__(self, client: GitHubClient) -> None:
        self._client = client

    @classmethod
    def from_env(cls) -> GitHubIssueClient:
        return cls(GitHubClient.from_env())

    def list_issues(self, labels: list[str]) -> list[ExistingIssue]:
        return [
            ExistingIssue(title=raw.get("title") or "", body=raw.get("body"))
            for raw in self._client.list_issues(labels)
        ]

    def create_issue(self, title: str, body: str, labels: list[str]) -> CreatedIssue:
        raw: dict[str, Any] = self._client.create_issue(title, body, labels)
        return CreatedIssue(number=raw["number"], html_url=raw.get("html_url", ""))


@dataclass(frozen=True)
class TicketOutcome:
    candidate: ClassifiedCandidate
    status: Literal["created", "dry_run", "skipped_existing", "failed"]
    issue_url: str = ""
    reason: str = ""

    @property
    def counts(self) -> bool:
        return self.status in ("created", "dry_run")


# ── Rendering ───────────────────────────────────────────────────────────────


def escape_table_cell(value: str) -> str:
    """Escape pipes and flatten newlines so *value* stays inside one table cell."""
    return value.replace("|", "\\|").replace("\r\n", " ").replace("\r", " ").replace("\n", " ")


def _fenced(text: str) -> str:
    # Fence must be longer than any backtick run inside the text.
    longest = max((len(m) for m in _BACKTICK_RUN_RE.findall(text)), default=0)
    fence = "`" * max(3, longest + 1)
    return f"{fence}\n{text}\n{fence}"


def build_issue_title(candidate: ClassifiedCandidate) -> str:
    return f"{TITLE_PREFIX}{escape_table_cell(candidate.title)}"


def build_issue_body(candidate: ClassifiedCandidate) -> str:
    meta = candidate.metadata
    rows = [
        ("URL", escape_table_cell(candidate.url)),
        ("Source", escape_table_cell(candidate.source)),
        ("Relevance Score", f"{candidate.relevance_score}/100"),
        ("Suggested Category", escape_table_cell(candidate.suggested_category)),
    ]
    if meta.stars is not None:
        rows.append(("Stars", str(meta.stars)))
    if meta.language:
        rows.append(("Language", escape_table_cell(meta.language)))
    if candidate.suggested_tags:
        tags = ", ".join(f"`{escape_table_cell(t)}`" for t in candidate.suggested_tags)
        rows.append(("Tags", tags))

    entry_summary = " ".join(candidate.description.split())
    entry = f"- [{candidate.title}]({candidate.url})"
    if entry_summary:
        entry += f" - {entry_summary}"

    lines = [
        "## Candidate Details",
        "",
        "| Field | Value |",
        "|-------|-------|",
        *(f"| **{name}** | {value} |" for name, value in rows),
        "",
        "## Description",
        "",
        _fenced(candidate.description),
        "",
        "## Reasoning",
        "",
        _fenced(candidate.reasoning),
        "",
        "## Suggested Entry",
        "",
        _fenced(entry),
        "",
        "---",
        "*Opened automatically by listradar. Close this issue to reject the candidate.*",
    ]
    return "\n".join(lines)


# ── Filing ──────────────────────────────────────────────────────────────────


def is_already_tracked(candidate: ClassifiedCandidate, existing: list[ExistingIssue]) -> bool:
    """True if any existing issue body mentions the candidate URL (any case)."""
    needles = {candidate.url.lower(), escape_table_cell(candidate.url).lower()}
    for issue in existing:
        body = (issue.body or "").lower()
        if any(n in body for n in needles):
            return True
    return False


def _fetch_existing(client: IssueClient, labels: list[str]) -> list[ExistingIssue]:
    try:
        existing = list(client.list_issues(labels))
    except Exception as exc:
        logger.warning("Could not list existing issues, assuming none: %s", exc)
        return []
    logger.info("Found %d existing open issues labelled %s", len(existing), labels)
    return existing


def file_issue(
    candidate: ClassifiedCandidate,
    labels: list[str],
    existing: list[ExistingIssue],
    dry_run: bool,
    client: IssueClient,
) -> TicketOutcome:
    """Decide and (unless dry-run) perform the creation for one candidate; never raises."""
    if is_already_tracked(candidate, existing):
        return TicketOutcome(candidate, "skipped_existing")
    if dry_run:
        return TicketOutcome(candidate, "dry_run")

    try:
        created = client.create_issue(
            build_issue_title(candidate), build_issue_body(candidate), labels
        )
    except Exception as exc:
        return TicketOutcome(candidate, "failed", reason=str(exc) or type(exc).__name__)
    return TicketOutcome(candidate, "created", issue_url=created.html_url)


def _report(outcome: TicketOutcome) -> None:
    title = build_issue_title(outcome.candidate)
    if outcome.status == "skipped_existing":
        logger.info("Issue already exists for %s, skipping", outcome.candidate.url)
    elif outcome.status == "dry_run":
        logger.info("[dry-run] Would create issue: %s", title)
    elif outcome.status == "failed":
        logger.warning("Failed to create issue %r: %s", title, outcome.reason)
    else:
        logger.info("Created issue: %s", outcome.issue_url or title)


def create_issues(
    candidates: list[ClassifiedCandidate],
    config: RadarConfig,
    dry_run: bool,
    client: IssueClient | None = None,
) -> int:
    """File one issue per classified candidate; return how many were (or would be) created.

    In dry-run mode the count reflects would-create and ``create_issue`` is never called.
    """
    if not candidates:
        return 0

    labels = list(config.issue_template.labels)
    tracker = client if client is not None else GitHubIssueClient.from_env()
    existing = _fetch_existing(tracker, labels)

    count = 0
    for candidate in candidates:
        outcome = file_issue(candidate, labels, existing, dry_run, tracker)
        _report(outcome)
        if outcome.counts:
            count += 1
            # Same URL twice in one run must not produce two issues.
            existing.append(ExistingIssue(body=candidate.url))

    return count
