"""Command line interface for Manga PDF Maker."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from .app import run_session
from .converter import ChapterConverter, ConversionOptions
from .errors import MangaPdfError
from .ingest import Chapter, SiteSelectors
from . import __version__


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="manga-pdf",
        description="Download the chapters of a web-published manga as one PDF per chapter.",
    )
    parser.add_argument("url", nargs="?", help="URL of the title's chapter listing")
    selection = parser.add_mutually_exclusive_group()
    selection.add_argument("--all", action="store_true", help="Download every chapter in order")
    selection.add_argument("--chapter", metavar="NAME", help="Download the chapter with this exact name")
    selection.add_argument("--list", action="store_true", help="List the chapters and exit")
    parser.add_argument("--out", dest="output_root", type=Path, help="Directory for PDFs and workspaces")
    parser.add_argument("--workers", type=int, default=8, help="Concurrent page downloads per chapter")
    parser.add_argument("--timeout", type=float, default=30.0, help="Per-request timeout in seconds")
    parser.add_argument("--retries", type=int, default=3, help="Retries for transient network errors")
    parser.add_argument("--quality", type=int, default=80, help="JPEG quality for normalized pages")
    parser.add_argument(
        "--skip-errors",
        action="store_true",
        help="Build the PDF from the pages that downloaded instead of failing the chapter",
    )
    parser.add_argument(
        "--keep-failed",
        action="store_true",
        help="Keep the staging directory of a failed chapter for inspection",
    )
    parser.add_argument("--chapter-selector", default=SiteSelectors.chapter_entry, help="CSS selector for chapter links")
    parser.add_argument("--reader-selector", default=SiteSelectors.reader_image, help="CSS selector for page images")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only print warnings and errors")
    parser.add_argument("--version", action="version", version=f"manga-pdf {__version__}")
    return parser


def configure_logging(verbose: bool, quiet: bool) -> None:
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def create_options(namespace: argparse.Namespace) -> ConversionOptions:
    extra = {}
    if namespace.output_root is not None:
        extra["output_root"] = namespace.output_root
    return ConversionOptions(
        max_workers=namespace.workers,
        timeout=namespace.timeout,
        retries=namespace.retries,
        jpeg_quality=namespace.quality,
        skip_errors=namespace.skip_errors,
        keep_failed_workspace=namespace.keep_failed,
        selectors=SiteSelectors(
            chapter_entry=namespace.chapter_selector,
            reader_image=namespace.reader_selector,
        ),
        **extra,
    )


def select_chapters(chapters: List[Chapter], namespace: argparse.Namespace) -> List[Chapter]:
    if namespace.chapter:
        selected = [c for c in chapters if c.display_name == namespace.chapter]
        if not selected:
            raise ValueError(f"Chapter not found: {namespace.chapter}")
        return selected
    return chapters


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose, args.quiet)
    log = logging.getLogger(__name__)
    try:
        options = create_options(args)
    except ValueError as exc:
        parser.error(str(exc))

    converter = ChapterConverter(options)
    if not (args.all or args.chapter or args.list):
        return run_session(args.url, converter=converter)
    if not args.url:
        parser.error("a URL is required with --all, --chapter or --list")

    try:
        chapters = converter.discover(args.url)
        if args.list:
            for chapter in chapters:
                print(f"{chapter.display_name}: {chapter.source_url}")
            return 0
        selected = select_chapters(chapters, args)
    except (MangaPdfError, ValueError) as exc:
        log.error(str(exc))
        return 1

    result = converter.process_chapters(selected)
    print(f"Wrote {len(result.succeeded)} of {len(result.outcomes)} chapters to {options.output_root}")
    for outcome in result.failed:
        print(outcome.describe())
    print(f"Elapsed: {result.elapsed_seconds:.2f}s")
    return 1 if result.failed else 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
