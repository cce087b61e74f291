"""CLI entry-point: ``python -m listradar run`` / ``python -m listradar validate``."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from listradar import config
from listradar.config import ConfigError, check_credentials, load_config
from listradar.models import PipelineResult
from listradar.pipeline import run_pipeline

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def write_outputs(result: PipelineResult, output_path: str) -> None:
    """Append ``key=value`` run outputs for the hosting workflow."""
    with open(output_path, "a", encoding="utf-8") as fh:
        fh.write(f"candidates_found={result.candidates_found}\n")
        fh.write(f"candidates_filtered={result.candidates_filtered}\n")
        fh.write(f"issues_created={result.issues_created}\n")


def _run(config_path: Path, dry_run: bool) -> int:
    try:
        logger.info("Loading config from %s", config_path)
        radar = load_config(config_path)
        check_credentials(dry_run)
        result = run_pipeline(radar, dry_run=dry_run)
    except ConfigError as exc:
        logger.error("%s", exc)
        return 1
    except Exception as exc:
        logger.exception("Run failed: %s", exc)
        return 1

    logger.info(
        "Done: %d found, %d after filtering, %d issues created%s",
        result.candidates_found,
        result.candidates_filtered,
        result.issues_created,
        " (dry run)" if dry_run else "",
    )
    if config.GITHUB_OUTPUT:
        write_outputs(result, config.GITHUB_OUTPUT)
    return 0


def _validate(config_path: Path, dry_run: bool) -> int:
    try:
        radar = load_config(config_path)
        check_credentials(dry_run)
    except ConfigError as exc:
        logger.error("%s", exc)
        return 1
    configured = [name for name, section in radar.sources if section is not None]
    logger.info("Config OK: sources=%s", ", ".join(configured))
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="listradar",
        description="Discover candidates for a curated list and file them as review issues.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    sub = parser.add_subparsers(dest="command")

    # ── run ────────────────────────────────────────────────────────────
    run_parser = sub.add_parser("run", help="Execute the discovery pipeline once.")
    run_parser.add_argument(
        "--config",
        type=Path,
        default=config.RADAR_CONFIG,
        help=f"Radar config file (default: {config.RADAR_CONFIG}).",
    )
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        default=config.RADAR_DRY_RUN,
        help="Collect, filter and classify but do not create issues.",
    )

    # ── validate ──────────────────────────────────────────────────────
    validate_parser = sub.add_parser("validate", help="Check a radar config file and exit.")
    validate_parser.add_argument(
        "--config",
        type=Path,
        default=config.RADAR_CONFIG,
        help=f"Radar config file (default: {config.RADAR_CONFIG}).",
    )
    validate_parser.add_argument(
        "--dry-run",
        action="store_true",
        default=config.RADAR_DRY_RUN,
        help="Only require the credentials a dry run needs.",
    )

    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if args.command == "run":
        sys.exit(_run(args.config, args.dry_run))
    elif args.command == "validate":
        sys.exit(_validate(args.config, args.dry_run))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
