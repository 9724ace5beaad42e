"""Chapter page link resolution."""

from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from . import SiteSelectors
from ..errors import ResolutionError, TransportError
from ..http import HttpClient

LOGGER = logging.getLogger(__name__)


class PageResolver:
    """Find the page image URLs of a chapter in reader order."""

    def __init__(self, client: HttpClient, *, selectors: Optional[SiteSelectors] = None) -> None:
        self.client = client
        self.selectors = selectors or SiteSelectors()

    def resolve_pages(self, chapter_url: str) -> List[str]:
        try:
            response = self.client.get(chapter_url)
        except TransportError as exc:
            raise ResolutionError(f"Could not fetch chapter page {chapter_url}: {exc}") from exc

        soup = BeautifulSoup(response.text, "html.parser")
        urls: List[str] = []
        for img in soup.select(self.selectors.reader_image):
            src = img.get("src") or img.get("data-src")
            if not src:
                LOGGER.debug("Skipping reader image without a source in %s", chapter_url)
                continue
            urls.append(urljoin(chapter_url, src.strip()))
        LOGGER.debug("Resolved %d page links from %s", len(urls), chapter_url)
        return urls


__all__ = ["PageResolver"]
