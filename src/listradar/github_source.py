"""GitHub repository search source."""

from __future__ import annotations

import logging
from datetime import date, timedelta

from listradar.config import RadarConfig
from listradar.github_client import GitHubClient
from listradar.models import Candidate, CandidateMetadata

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 1000
_PER_PAGE = 100


def created_after_date(spec: str, today: date | None = None) -> str:
    """``"30d"`` → ISO date 30 days before *today*."""
    try:
        days = int(spec.removesuffix("d"))
    except ValueError:
        raise ValueError(f"Invalid date spec: {spec}") from None
    base = today or date.today()
    return (base - timedelta(days=days)).isoformat()


def build_search_query(topics: list[str], config: RadarConfig, today: date | None = None) -> str:
    """Repos with any of *topics*, optionally in any of the languages, above min stars."""
    gh = config.sources.github
    if gh is None:
        raise ValueError("github source is not configured")
    parts = [" ".join(f"topic:{t}" for t in topics)]

    if gh.languages:
        parts.append(" ".join(f"language:{lang}" for lang in gh.languages))

    if gh.min_stars > 0:
        parts.append(f"stars:>={gh.min_stars}")

    parts.append(f"created:>={created_after_date(gh.created_after, today)}")
    return " ".join(parts)


def collect_github(config: RadarConfig, client: GitHubClient | None = None) -> list[Candidate]:
    """Top repositories (one page, by stars) matching the configured topics. Never raises."""
    if config.sources.github is None:
        return []

    try:
        query = build_search_query(config.sources.github.topics, config)
        logger.info("GitHub search query: %s", query)
        gh = client if client is not None else GitHubClient.from_env()
        repos = gh.search_repositories(query, per_page=_PER_PAGE)
    except Exception as exc:
        logger.warning("GitHub search failed: %s", exc)
        return []

    candidates: list[Candidate] = []
    for repo in repos:
        try:
            candidates.append(
                Candidate(
                    url=repo["html_url"],
                    title=repo.get("full_name") or repo["html_url"],
                    description=(repo.get("description") or "")[:MAX_DESCRIPTION_LENGTH],
                    source="github",
                    metadata=CandidateMetadata(
                        stars=repo.get("stargazers_count"),
                        language=repo.get("language") or None,
                        topics=repo.get("topics") or [],
                    ),
                )
            )
        except Exception as exc:
            logger.warning("Skipping malformed repository entry: %s", exc)

    logger.info("GitHub: %d candidates", len(candidates))
    return candidates
