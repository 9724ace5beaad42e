"""Interactive entry point for Manga PDF Maker.

Asks for a title URL, lists its chapters and lets the user pick what to
download through :class:`~manga_pdf_maker.ui.console.SelectionSession`.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .converter import ChapterConverter, ConversionOptions
from .errors import MangaPdfError
from .ui.console import SelectionSession

LOGGER = logging.getLogger(__name__)


def run_session(
    listing_url: Optional[str] = None,
    options: Optional[ConversionOptions] = None,
    *,
    converter: Optional[ChapterConverter] = None,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
) -> int:
    converter = converter or ChapterConverter(options)
    if not listing_url:
        listing_url = input_fn("Enter the URL of the manga: ").strip()
    output_fn(f"URL: {listing_url}")

    try:
        chapters = converter.discover(listing_url)
    except MangaPdfError as exc:
        LOGGER.error("%s: %s", exc.kind, exc)
        return 1

    session = SelectionSession(chapters, converter.process_chapter)
    while not session.done:
        try:
            token = input_fn(session.prompt() + "\n")
        except EOFError:
            output_fn("Exiting...")
            break
        for line in session.feed(token):
            output_fn(line)

    return 1 if any(not outcome.success for outcome in session.outcomes) else 0


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    raise SystemExit(run_session())


if __name__ == "__main__":
    main()
