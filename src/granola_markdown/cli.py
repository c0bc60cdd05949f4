"""Command-line interface for granola-to-markdown."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from .config import Config, load_config, validate_days
from .errors import CacheNotFoundError, GranolaExportError
from .export_engine import run_export
from .models import ExportResult

_MAX_LISTED_SKIPS = 10


def _print_summary(config: Config, result: ExportResult, *, verbose: bool) -> None:
    if result.start_date is not None:
        print(
            f"Exporting meetings from {result.start_date:%Y-%m-%d} "
            f"to {result.end_date:%Y-%m-%d}"
        )
    else:
        print("Exporting all meetings (no date filter)")

    if result.matched == 0:
        if config.days is not None:
            print("No meetings found in the date range. Try increasing the days with --days option.")
        else:
            print("No valid meetings found in the cache.")
        return

    hint = " (already exist, use --force to overwrite)" if result.skipped else ""
    prefix = "[DRY RUN] " if result.dry_run else ""
    print(
        f"{prefix}Export complete! Exported {result.exported} meetings, "
        f"skipped {result.skipped} meetings{hint}."
    )
    print(f"Files saved to: {result.output_dir}")

    if result.skipped and verbose:
        print("\nSkipped meetings (already exist):")
        for name in result.skipped_files[:_MAX_LISTED_SKIPS]:
            print(f"- {name}")
        if len(result.skipped_files) > _MAX_LISTED_SKIPS:
            print(f"... and {len(result.skipped_files) - _MAX_LISTED_SKIPS} more")
        print("\nUse --force option to overwrite existing files.")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="granola-to-markdown",
        description="Export Granola meeting notes and transcripts to Markdown files",
    )
    parser.add_argument(
        "--days", "-d",
        default=None,
        help="Number of days to look back for meetings (default: all time)",
    )
    parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Force overwrite of existing files",
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Output directory path (default: ~/meetings)",
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to config YAML (default: ~/.config/granola-to-markdown/config.yaml)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be written without writing files",
    )

    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = load_config(args.config)
        overrides: dict = {}
        if args.days is not None:
            overrides["days"] = validate_days(args.days)
        if args.output is not None:
            overrides["output_dir"] = args.output.expanduser()
        if args.force:
            overrides["force"] = True
        if args.dry_run:
            overrides["dry_run"] = True
        config = replace(config, **overrides)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1) from None

    try:
        result = run_export(config)
    except GranolaExportError as e:
        print(f"Error: {e}", file=sys.stderr)
        if isinstance(e, CacheNotFoundError):
            print(
                "\nSuggestions:\n"
                "- Make sure Granola desktop app is installed and has been used\n"
                "- The cache file should be located at "
                "~/Library/Application Support/Granola/cache-v3.json",
                file=sys.stderr,
            )
        raise SystemExit(1) from None

    _print_summary(config, result, verbose=args.verbose)
