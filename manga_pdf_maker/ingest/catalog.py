"""Title listing ingestion."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from . import Chapter, SiteSelectors
from ..errors import DiscoveryError, TransportError
from ..http import HttpClient, content_type_of
from ..text.normalize import extract_order_key, is_chapter_name

LOGGER = logging.getLogger(__name__)

HTML_TYPES = {"text/html", "application/xhtml+xml"}


class ChapterCatalog:
    """Extract the ordered chapter list from a title's listing page."""

    def __init__(self, client: HttpClient, *, selectors: Optional[SiteSelectors] = None) -> None:
        self.client = client
        self.selectors = selectors or SiteSelectors()

    def discover(self, listing_url: str) -> List[Chapter]:
        """Return the chapters of the title at *listing_url*, sorted by number.

        Entries that are not chapters (volume headers and the like) are
        dropped. Chapters sharing a number, and chapters with no number at
        all, keep the order they had on the page; the latter sort last.
        """

        try:
            response = self.client.get(listing_url)
        except TransportError as exc:
            raise DiscoveryError(f"Could not fetch chapter listing {listing_url}: {exc}") from exc

        media_type = content_type_of(response)
        if media_type and media_type not in HTML_TYPES:
            raise DiscoveryError(
                f"Chapter listing {listing_url} returned {media_type!r}, expected HTML"
            )

        entries = self._parse_entries(response.text, listing_url)
        chapters = [
            Chapter(display_name=name, source_url=url, order_key=extract_order_key(name))
            for name, url in self._unique(entries)
            if is_chapter_name(name)
        ]
        LOGGER.info("Found %d chapters at %s", len(chapters), listing_url)
        return sort_chapters(chapters)

    def _parse_entries(self, html: str, base_url: str) -> List[Tuple[str, str]]:
        soup = BeautifulSoup(html, "html.parser")
        entries: List[Tuple[str, str]] = []
        for node in soup.select(self.selectors.chapter_entry):
            name = node.get_text().strip()
            href = node.get("href")
            if not href:
                LOGGER.debug("Skipping chapter entry without href: %s", name)
                continue
            entries.append((name, urljoin(base_url, href)))
        return entries

    def _unique(self, entries: Iterable[Tuple[str, str]]) -> Iterable[Tuple[str, str]]:
        # A repeated name keeps its first position but takes the later link.
        links: Dict[str, str] = {}
        for name, url in entries:
            if name in links:
                LOGGER.debug("Duplicate chapter entry %s now points to %s", name, url)
            links[name] = url
        return links.items()


def sort_chapters(chapters: Iterable[Chapter]) -> List[Chapter]:
    # sorted() is stable: equal keys, inf included, keep page order.
    return sorted(chapters, key=lambda chapter: chapter.order_key)


__all__ = ["ChapterCatalog", "sort_chapters"]
