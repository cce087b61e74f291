"""Pipeline orchestration — wires collect → filter → classify → output."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from listradar.classifier import classify_candidates
from listradar.collect import collect_all
from listradar.config import RadarConfig
from listradar.dedupe import dedupe
from listradar.issues import create_issues
from listradar.keywords import filter_candidates
from listradar.models import Candidate, ClassifiedCandidate, PipelineResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineDeps:
    """The four stages. Each runs to completion before the next starts."""

    collect: Callable[[RadarConfig], list[Candidate]]
    filter: Callable[[list[Candidate], RadarConfig], list[Candidate]]
    classify: Callable[[list[Candidate], RadarConfig], list[ClassifiedCandidate]]
    output: Callable[[list[ClassifiedCandidate], RadarConfig, bool], int]


def filter_stage(candidates: list[Candidate], config: RadarConfig) -> list[Candidate]:
    """Keyword match first, then drop anything already in the curated list."""
    return dedupe(filter_candidates(candidates, config), config)


def default_deps() -> PipelineDeps:
    return PipelineDeps(
        collect=collect_all,
        filter=filter_stage,
        classify=classify_candidates,
        output=create_issues,
    )


def run_pipeline(
    config: RadarConfig,
    deps: PipelineDeps | None = None,
    dry_run: bool = False,
) -> PipelineResult:
    """Run the four stages once and return the counters.

    Per-item failures are handled inside the stages; anything that escapes a
    stage aborts the run.
    """
    stages = deps or default_deps()

    # ── 1. Collect ────────────────────────────────────────────────────
    logger.info("Stage 1/4: Collecting candidates...")
    collected = stages.collect(config)
    logger.info("  Found %d candidates", len(collected))

    # ── 2. Filter (keywords + dedupe) ─────────────────────────────────
    logger.info("Stage 2/4: Filtering candidates...")
    filtered = stages.filter(collected, config)
    logger.info("  %d candidates after filtering", len(filtered))

    # ── 3. Classify ───────────────────────────────────────────────────
    logger.info("Stage 3/4: Classifying candidates...")
    classified = stages.classify(filtered, config)
    logger.info("  %d candidates classified", len(classified))

    # ── 4. Output ─────────────────────────────────────────────────────
    logger.info("Stage 4/4: Creating output%s...", " (dry run)" if dry_run else "")
    issues_created = stages.output(classified, config, dry_run)
    logger.info("  %d issues created", issues_created)

    return PipelineResult(
        candidates_found=len(collected),
        candidates_filtered=len(filtered),
        issues_created=issues_created,
    )
