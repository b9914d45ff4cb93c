# src/goosereview/main.py — v1
"""CLI entry point — batch and insights commands.

Usage:
    goose-review batch <directory> [options]
    goose-review insights <directory> [--file PATH | --stats | --clear]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from goosereview.config.settings import ConfigurationError
from goosereview.version import __version__

if TYPE_CHECKING:
    from goosereview.batch.models import BatchProgress

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        _setup_logging(args.verbose)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="goose-review",
        description=f"goose-review v{__version__} — AI code review for whole projects",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- batch ---
    p_batch = subparsers.add_parser(
        "batch", help="Review every analyzable file of a project",
    )
    p_batch.add_argument("directory", type=Path, help="Project root")
    p_batch.add_argument(
        "-f", "--force", action="store_true",
        help="Re-analyze files even if unchanged since the last review",
    )
    p_batch.add_argument(
        "-c", "--concurrency", type=int, default=None,
        help="Number of files analyzed in parallel (default: GOOSE_DEFAULT_CONCURRENCY)",
    )
    p_batch.add_argument(
        "--ext", dest="extensions", nargs="+", default=None,
        help="Only analyze these extensions, e.g. --ext .py .ts",
    )
    p_batch.add_argument(
        "-d", "--dir", dest="directories", action="append", default=None,
        help="Restrict the walk to this sub-directory (repeatable)",
    )
    p_batch.add_argument(
        "-e", "--exclude", dest="exclude_patterns", action="append", default=None,
        help="Extra ignore pattern (repeatable)",
    )
    p_batch.add_argument(
        "-o", "--output", choices=("text", "json", "markdown"), default="text",
        help="Report format on stdout (default: text)",
    )
    p_batch.add_argument("--csv", type=Path, default=None, help="Also write findings as CSV")
    p_batch.add_argument("--json", type=Path, default=None, help="Also write the full result as JSON")
    p_batch.set_defaults(func=_cmd_batch)

    # --- insights ---
    p_insights = subparsers.add_parser(
        "insights", help="Inspect or reset stored insights",
    )
    p_insights.add_argument("directory", type=Path, help="Project root")
    group = p_insights.add_mutually_exclusive_group()
    group.add_argument("--file", dest="file_path", default=None, help="Show the record for one path")
    group.add_argument("--stats", action="store_true", help="Show record count and size")
    group.add_argument("--clear", action="store_true", help="Delete every stored insight")
    p_insights.set_defaults(func=_cmd_insights)

    return parser


async def _cmd_batch(args: argparse.Namespace) -> int:
    """Execute a batch review."""
    from goosereview.api.facade import run_batch_analysis
    from goosereview.batch.models import BatchAnalysisOptions
    from goosereview.config.settings import Settings
    from goosereview.export.exporter import (
        export_result_csv,
        export_result_json,
        render_markdown_report,
        render_text_summary,
    )

    directory: Path = args.directory
    if not directory.is_dir():
        logger.error("Not a directory: %s", directory)
        return 1

    settings = Settings()
    options = BatchAnalysisOptions(
        force=args.force,
        concurrency=args.concurrency or settings.default_concurrency,
        extensions=args.extensions,
        directories=args.directories,
        exclude_patterns=args.exclude_patterns,
        on_progress=_print_progress if sys.stderr.isatty() else None,
    )

    logger.info("Batch review of %s", directory)
    result = await run_batch_analysis(directory, options, settings=settings)
    if options.on_progress is not None:
        sys.stderr.write("\r" + " " * 100 + "\r")

    if args.output == "json":
        print(result.model_dump_json(by_alias=True, indent=2))
    elif args.output == "markdown":
        print(render_markdown_report(result))
    else:
        print(render_text_summary(result))

    if args.json:
        export_result_json(result, args.json)
        logger.info("JSON report written to %s", args.json)
    if args.csv:
        rows = export_result_csv(result, args.csv)
        logger.info("CSV report written to %s (%d rows)", args.csv, rows)
    return 0


async def _cmd_insights(args: argparse.Namespace) -> int:
    """Show or reset stored insights."""
    from goosereview.api import facade
    from goosereview.config.settings import Settings

    directory: Path = args.directory
    if not directory.is_dir():
        logger.error("Not a directory: %s", directory)
        return 1

    settings = Settings()

    if args.clear:
        await facade.clear_insights(directory, settings=settings)
        print("Insights cleared.")
        return 0

    if args.file_path:
        record = await facade.get_insight(directory, args.file_path, settings=settings)
        if record is None:
            logger.error("No insight for %s", args.file_path)
            return 1
        print(record.model_dump_json(by_alias=True, indent=2))
        return 0

    stats = await facade.insight_stats(directory, settings=settings)
    print(f"\nInsights for {directory}:")
    print(f"  Records:    {stats.count}")
    print(f"  Total size: {stats.total_size:,} bytes")
    return 0


def _print_progress(progress: BatchProgress) -> None:
    """Single-line progress on stderr."""
    done = progress.analyzed + progress.skipped + progress.errors
    line = f"[{done}/{progress.total}] {progress.current_file}"
    sys.stderr.write("\r" + line[:100].ljust(100))
    sys.stderr.flush()


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage from GOOSE_* settings."""
    from goosereview.config.settings import Settings
    from goosereview.logging.logger import setup_logging

    settings = Settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
