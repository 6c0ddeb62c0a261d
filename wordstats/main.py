from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from pydantic import TypeAdapter, ValidationError

from wordstats.core.config import settings
from wordstats.core.errors import PipelineError
from wordstats.core.logger import get_logger, route_logs_to_stderr, set_log_level
from wordstats.core.schemas import BookSource, WordStatsReport
from wordstats.services.fetcher import HttpFetcher, SourceFetcher
from wordstats.services.pipeline import WordStatsPipeline

logger = get_logger(__name__)

_SOURCES_ADAPTER = TypeAdapter(List[BookSource])


def _parse_source(value: str) -> BookSource:
    name, sep, url = value.partition("=")
    if not sep or not name.strip() or not url.strip():
        raise argparse.ArgumentTypeError(f"Expected NAME=URL, got '{value}'")
    return BookSource(name=name.strip(), url=url.strip())


def load_sources_file(path: Path) -> List[BookSource]:
    """Read a JSON list of {"name": ..., "url": ...} objects."""
    return _SOURCES_ADAPTER.validate_json(path.read_text(encoding="utf-8"))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Count the most frequent words across several documents.")
    parser.add_argument(
        "--source",
        action="append",
        type=_parse_source,
        default=[],
        metavar="NAME=URL",
        help="Document to include (repeatable). URL may be http(s)://, file:// or a local path.",
    )
    parser.add_argument("--sources-file", type=Path, help="JSON file with a list of {name, url} objects.")
    parser.add_argument("--top", type=int, default=settings.TOP_N, help="Number of words to report.")
    parser.add_argument("--start-marker", default=settings.START_MARKER, help="Marker opening the document body.")
    parser.add_argument("--end-marker", default=settings.END_MARKER, help="Marker closing the document body.")
    parser.add_argument("--workers", type=int, default=settings.PROCESS_WORKERS, help="Processing threads.")
    parser.add_argument("--timeout", type=float, default=settings.FETCH_TIMEOUT_SECONDS, help="HTTP timeout (s).")
    parser.add_argument("--retries", type=int, default=settings.FETCH_MAX_RETRIES, help="HTTP retries per source.")
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        default=settings.FAIL_FAST,
        help="Cancel remaining fetches as soon as one fails.",
    )
    parser.add_argument("--json", action="store_true", help="Print the report as JSON.")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: LOG_LEVEL, or ERROR with --json). With --json, logs go to stderr.",
    )
    return parser


def resolve_sources(args: argparse.Namespace) -> List[BookSource]:
    sources: List[BookSource] = []
    if args.sources_file is not None:
        sources.extend(load_sources_file(args.sources_file))
    sources.extend(args.source)
    return sources or list(settings.BOOK_SOURCES)


def render_text(report: WordStatsReport, out: TextIO) -> None:
    out.write("Most frequent words:\n")
    for position, entry in enumerate(report.entries, start=1):
        out.write(f"{position}. {entry.word}: {entry.count}\n")
    out.write("\n")
    out.write(f"Fetch time: {report.timings.fetch_seconds:.2f} s\n")
    out.write(f"Processing time: {report.timings.process_seconds:.2f} s\n")


def render_json(report: WordStatsReport, out: TextIO) -> None:
    out.write(report.model_dump_json(indent=2))
    out.write("\n")


async def run(args: argparse.Namespace, sources: Sequence[BookSource]) -> WordStatsReport:
    http = HttpFetcher(timeout=args.timeout, max_retries=args.retries)
    async with SourceFetcher(http=http) as fetcher:
        pipeline = WordStatsPipeline(
            fetcher,
            top_n=args.top,
            start_marker=args.start_marker,
            end_marker=args.end_marker,
            process_workers=args.workers,
            fail_fast=args.fail_fast,
        )
        return await pipeline.run(sources)


def main(argv: Optional[Sequence[str]] = None, out: Optional[TextIO] = None) -> int:
    if out is None:
        out = sys.stdout
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.top < 0:
        parser.error("--top must be >= 0")
    if args.workers < 1:
        parser.error("--workers must be >= 1")

    try:
        sources = resolve_sources(args)
    except (OSError, ValidationError) as e:
        parser.error(f"Cannot load sources: {e}")

    # stdout carries only the JSON report in --json mode
    route_logs_to_stderr(args.json)
    set_log_level(args.log_level or ("ERROR" if args.json else settings.LOG_LEVEL))

    try:
        report = asyncio.run(run(args, sources))
    except PipelineError as e:
        logger.error(f"[main] {e}")
        return 1

    if args.json:
        render_json(report, out)
    else:
        render_text(report, out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
