"""Domain models used across the pipeline."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

SourceKind = Literal["github", "arxiv", "blog", "web_page"]

UNCATEGORIZED = "Uncategorized"


class CandidateMetadata(BaseModel):
    """Source-specific extras. ``None`` means unknown, never zero/false."""

    model_config = ConfigDict(frozen=True)

    stars: int | None = None
    language: str | None = None
    topics: list[str] | None = None
    authors: list[str] | None = None
    published_at: str | None = None
    feed_name: str | None = None
    page_name: str | None = None


class Candidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    title: str = ""
    description: str = ""
    source: SourceKind
    metadata: CandidateMetadata = Field(default_factory=CandidateMetadata)

    @field_validator("url")
    @classmethod
    def check_url_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("candidate url must be non-empty")
        return value

    @property
    def key(self) -> str:
        """Identity across the pipeline: the case-insensitive URL."""
        return self.url.lower()


class ClassificationResult(BaseModel):
    relevance_score: int = Field(ge=0, le=100)
    suggested_category: str = UNCATEGORIZED
    suggested_tags: list[str] = Field(default_factory=list)
    reasoning: str = ""


class ClassifiedCandidate(Candidate):
    relevance_score: int = Field(ge=0, le=100)
    suggested_category: str = UNCATEGORIZED
    suggested_tags: list[str] = Field(default_factory=list)
    reasoning: str = ""

    @classmethod
    def from_result(
        cls, candidate: Candidate, result: ClassificationResult
    ) -> ClassifiedCandidate:
        return cls(**candidate.model_dump(), **result.model_dump())


class PipelineResult(BaseModel):
    candidates_found: int = 0
    candidates_filtered: int = 0
    issues_created: int = 0
