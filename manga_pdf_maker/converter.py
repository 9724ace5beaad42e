"""Per-chapter pipeline shared by the interactive session and the CLI.

Every selected chapter goes through the same sequence: resolve its page
links, download and normalize the pages into a staging directory, then bind
them into a PDF in the output root. Chapters run one after another; a failure
is reported for that chapter and never stops the session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional
import logging
import os
import time

from .assembly import Document, DocumentAssembler, Workspace
from .errors import MangaPdfError, ResolutionError
from .http import DEFAULT_USER_AGENT, HttpClient
from .images import DEFAULT_JPEG_QUALITY, ImageFetcher, ProgressCallback
from .ingest import Chapter, SiteSelectors
from .ingest.catalog import ChapterCatalog
from .ingest.pages import PageResolver

__all__ = [
    "ChapterConverter",
    "ChapterOutcome",
    "ConversionOptions",
    "ConversionResult",
]

logger = logging.getLogger(__name__)


@dataclass
class ConversionOptions:
    """Options that control how chapters are fetched and written."""

    output_root: Path = field(default_factory=lambda: Path(os.getenv("MANGA_PDF_OUTPUT", ".")))
    max_workers: int = 8
    timeout: float = 30.0
    retries: int = 3
    backoff: float = 0.5
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    user_agent: str = field(default_factory=lambda: os.getenv("MANGA_PDF_USER_AGENT", DEFAULT_USER_AGENT))
    skip_errors: bool = False  # embed what downloaded instead of failing the chapter
    keep_failed_workspace: bool = False
    selectors: SiteSelectors = field(default_factory=SiteSelectors)

    def __post_init__(self) -> None:
        self.output_root = Path(self.output_root)
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.retries < 0:
            raise ValueError("retries must not be negative")
        if self.backoff < 0:
            raise ValueError("backoff must not be negative")
        if not 1 <= self.jpeg_quality <= 95:
            raise ValueError("jpeg_quality must be between 1 and 95")
        if not self.user_agent:
            raise ValueError("user_agent must not be empty")


@dataclass
class ChapterOutcome:
    """Result of running one chapter through the pipeline."""

    chapter: Chapter
    document: Optional[Document] = None
    error: Optional[MangaPdfError] = None

    @property
    def success(self) -> bool:
        return self.error is None

    def describe(self) -> str:
        if self.error is not None:
            return (
                f"Failed {self.chapter.display_name} ({self.chapter.source_url}): "
                f"{self.error.kind}: {self.error}"
            )
        if self.document is None:
            return f"Downloaded {self.chapter.display_name} successfully"
        return f"Downloaded {self.document.name} successfully ({self.document.page_count} pages)"


@dataclass
class ConversionResult:
    """Outcome returned after processing a selection of chapters."""

    outcomes: List[ChapterOutcome]
    elapsed_seconds: float

    @property
    def succeeded(self) -> List[ChapterOutcome]:
        return [outcome for outcome in self.outcomes if outcome.success]

    @property
    def failed(self) -> List[ChapterOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.success]


class ChapterConverter:
    """Run chapters through resolve, fetch and assemble."""

    def __init__(
        self,
        options: Optional[ConversionOptions] = None,
        *,
        client: Optional[HttpClient] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> None:
        self.options = options or ConversionOptions()
        self.client = client or HttpClient(
            user_agent=self.options.user_agent,
            timeout=self.options.timeout,
            retries=self.options.retries,
            backoff=self.options.backoff,
        )
        self.catalog = ChapterCatalog(self.client, selectors=self.options.selectors)
        self.resolver = PageResolver(self.client, selectors=self.options.selectors)
        self.fetcher = ImageFetcher(
            self.client,
            max_workers=self.options.max_workers,
            jpeg_quality=self.options.jpeg_quality,
            skip_errors=self.options.skip_errors,
        )
        self.assembler = DocumentAssembler(self.options.output_root)
        self.progress = progress

    # Public API -----------------------------------------------------------------
    def discover(self, listing_url: str) -> List[Chapter]:
        return self.catalog.discover(listing_url)

    def process_chapter(self, chapter: Chapter) -> ChapterOutcome:
        """Produce the PDF for *chapter*; failures are returned, not raised."""

        logger.info("Downloading %s from %s", chapter.display_name, chapter.source_url)
        workspace: Optional[Workspace] = None
        try:
            pages = self.resolver.resolve_pages(chapter.source_url)
            if not pages:
                raise ResolutionError(f"No page images found at {chapter.source_url}")
            logger.info("Downloading %d pages", len(pages))

            workspace = self.assembler.create_workspace(chapter.display_name)
            self.fetcher.fetch_all(pages, workspace, progress=self.progress)
            document = self.assembler.assemble(
                chapter.display_name, workspace, range(len(pages))
            )
        except MangaPdfError as exc:
            outcome = ChapterOutcome(chapter=chapter, error=exc)
            logger.error(outcome.describe())
            if workspace is not None:
                self._discard_workspace(workspace)
            return outcome

        outcome = ChapterOutcome(chapter=chapter, document=document)
        logger.info(outcome.describe())
        return outcome

    def process_chapters(
        self,
        chapters: Iterable[Chapter],
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> ConversionResult:
        start_time = time.perf_counter()
        outcomes: List[ChapterOutcome] = []
        for chapter in chapters:
            if should_stop and should_stop():
                logger.info("Stopping before %s", chapter.display_name)
                break
            outcomes.append(self.process_chapter(chapter))
        elapsed = time.perf_counter() - start_time
        logger.info(
            "Finished %d chapters (%d failed) in %.2fs",
            len(outcomes),
            sum(1 for outcome in outcomes if not outcome.success),
            elapsed,
        )
        return ConversionResult(outcomes=outcomes, elapsed_seconds=elapsed)

    # Failure handling -----------------------------------------------------------
    def _discard_workspace(self, workspace: Workspace) -> None:
        if self.options.keep_failed_workspace:
            logger.warning("Keeping partial workspace %s for inspection", workspace.root_path)
            return
        try:
            workspace.destroy()
        except MangaPdfError as exc:
            logger.warning("Could not clean up %s: %s", workspace.root_path, exc)
