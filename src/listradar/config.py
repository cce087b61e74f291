"""Centralised configuration: environment variables (dotenv) and the radar YAML file."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

load_dotenv()

# ── GitHub (search source + issue tracker) ────────────────────────────────
GITHUB_TOKEN: str = os.getenv("GITHUB_TOKEN", "")
GITHUB_REPOSITORY: str = os.getenv("GITHUB_REPOSITORY", "")
GITHUB_API_URL: str = os.getenv("GITHUB_API_URL", "https://api.github.com")

# ── LLM ────────────────────────────────────────────────────────────────────
LLM_PROVIDER: str = os.getenv("LLM_PROVIDER", "openai")
LLM_API_KEY: str = os.getenv("LLM_API_KEY", "")
DEFAULT_MODEL: str = "gpt-4o-mini"

# ── Run ────────────────────────────────────────────────────────────────────
RADAR_CONFIG: Path = Path(os.getenv("RADAR_CONFIG", "radar.yml"))
RADAR_DRY_RUN: bool = os.getenv("RADAR_DRY_RUN", "").strip().lower() == "true"
GITHUB_OUTPUT: str = os.getenv("GITHUB_OUTPUT", "")

_DATE_SPEC_RE = re.compile(r"^\d+d$")


class ConfigError(ValueError):
    """Raised when the radar config cannot be read or fails validation."""


def _check_http_urls(urls: list[str]) -> list[str]:
    for url in urls:
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid URL: {url!r}")
    return urls


# ── Schema ─────────────────────────────────────────────────────────────────


class GithubSource(BaseModel):
    topics: list[str] = Field(min_length=1)
    languages: list[str] | None = None
    min_stars: int = Field(default=0, ge=0)
    created_after: str = "30d"

    @field_validator("created_after")
    @classmethod
    def check_date_spec(cls, value: str) -> str:
        if not _DATE_SPEC_RE.match(value):
            raise ValueError('Must be in format "Nd" (e.g. "30d")')
        return value


class ArxivSource(BaseModel):
    categories: list[str] = Field(min_length=1)
    keywords: list[str] = Field(min_length=1)


class BlogsSource(BaseModel):
    feeds: list[str] = Field(min_length=1)
    keywords: list[str] | None = None

    @field_validator("feeds")
    @classmethod
    def check_feed_urls(cls, value: list[str]) -> list[str]:
        return _check_http_urls(value)


class WebPagesSource(BaseModel):
    urls: list[str] = Field(min_length=1)
    keywords: list[str] | None = None
    model: str = DEFAULT_MODEL

    @field_validator("urls")
    @classmethod
    def check_page_urls(cls, value: list[str]) -> list[str]:
        return _check_http_urls(value)


class Sources(BaseModel):
    github: GithubSource | None = None
    arxiv: ArxivSource | None = None
    blogs: BlogsSource | None = None
    web_pages: WebPagesSource | None = None

    @model_validator(mode="after")
    def check_at_least_one(self) -> Sources:
        if not (self.github or self.arxiv or self.blogs or self.web_pages):
            raise ValueError("At least one source must be configured")
        return self


class Classification(BaseModel):
    model: str = DEFAULT_MODEL
    threshold: int = Field(default=70, ge=0, le=100)
    max_issues_per_run: int = Field(default=5, gt=0)


class IssueTemplate(BaseModel):
    labels: list[str] = Field(default_factory=lambda: ["radar", "needs-review"])


class RadarConfig(BaseModel):
    description: str = Field(min_length=1)
    list_file: str = "README.md"
    sources: Sources
    classification: Classification = Field(default_factory=Classification)
    issue_template: IssueTemplate = Field(default_factory=IssueTemplate)


# ── Loading ────────────────────────────────────────────────────────────────


def parse_config(yaml_content: str) -> RadarConfig:
    """Parse and validate radar config YAML text."""
    try:
        raw: Any = yaml.safe_load(yaml_content)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Malformed YAML: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError("Config must be a YAML mapping")

    try:
        return RadarConfig.model_validate(raw)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigError(f"Invalid config: {problems}") from exc


def load_config(path: str | Path) -> RadarConfig:
    """Read and validate the radar config file at *path*."""
    p = Path(path)
    try:
        content = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Could not read config file {p}: {exc}") from exc
    return parse_config(content)


def check_credentials(dry_run: bool = False) -> None:
    """Raise ``ConfigError`` naming every required environment variable that is unset.

    The LLM key is always needed. Issue creation additionally needs the GitHub
    token and an ``owner/repo`` repository, unless this is a dry run.
    """
    missing: list[str] = []
    if not LLM_API_KEY:
        missing.append("LLM_API_KEY")
    if not dry_run:
        if not GITHUB_TOKEN:
            missing.append("GITHUB_TOKEN")
        if "/" not in GITHUB_REPOSITORY:
            missing.append("GITHUB_REPOSITORY (owner/repo)")
    if missing:
        raise ConfigError(f"Missing required environment: {', '.join(missing)}")
