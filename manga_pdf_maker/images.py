"""Concurrent page retrieval and JPEG normalization."""

from __future__ import annotations

import io
import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Dict, List, Optional, Sequence

from PIL import Image, UnidentifiedImageError

from .assembly import Workspace
from .errors import InvalidContentError, MangaPdfError, WorkspaceError
from .http import HttpClient, content_type_of
from .ingest import PageImage

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[str, float], None]

DEFAULT_JPEG_QUALITY = 80


def normalize_image(data: bytes, *, url: str, quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    """Re-encode *data* as an RGB JPEG, flattening transparency onto white."""

    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
                rgba = image.convert("RGBA")
                flattened = Image.new("RGB", rgba.size, (255, 255, 255))
                flattened.paste(rgba, mask=rgba.split()[3])
            else:
                flattened = image.convert("RGB")
    except Image.DecompressionBombError as exc:
        raise InvalidContentError(url, "oversized", f"Image from {url} is too large: {exc}") from exc
    except (UnidentifiedImageError, OSError) as exc:
        raise InvalidContentError(url, "undecodable", f"Could not decode image from {url}: {exc}") from exc

    buffer = io.BytesIO()
    flattened.save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()


class ImageFetcher:
    """Download the pages of a chapter on a bounded worker pool.

    Results are keyed by page index, so the returned list and the staged file
    names follow the input order no matter which download finishes first.
    """

    def __init__(
        self,
        client: HttpClient,
        *,
        max_workers: int = 8,
        jpeg_quality: int = DEFAULT_JPEG_QUALITY,
        skip_errors: bool = False,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.client = client
        self.max_workers = max_workers
        self.jpeg_quality = jpeg_quality
        self.skip_errors = skip_errors

    def fetch_all(
        self,
        urls: Sequence[str],
        workspace: Workspace,
        progress: Optional[ProgressCallback] = None,
    ) -> List[Optional[bytes]]:
        pages = [PageImage(index=i, source_url=url) for i, url in enumerate(urls)]
        results: Dict[int, Optional[bytes]] = {}
        total = len(pages) or 1
        LOGGER.info("Downloading %d pages into %s", len(pages), workspace.root_path)

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures: Dict[Future, PageImage] = {
                executor.submit(self._fetch_page, page, workspace): page for page in pages
            }
            for future in as_completed(futures):
                page = futures[future]
                try:
                    results[page.index] = future.result()
                except MangaPdfError as exc:
                    if not self.skip_errors:
                        for pending in futures:
                            pending.cancel()
                        LOGGER.error(
                            "Error downloading page %d from %s: %s", page.index + 1, page.source_url, exc
                        )
                        raise
                    LOGGER.warning(
                        "Skipping page %d from %s: %s", page.index + 1, page.source_url, exc
                    )
                    results[page.index] = None
                if progress:
                    progress(workspace.chapter_name, len(results) / total)

        return [results[page.index] for page in pages]

    def _fetch_page(self, page: PageImage, workspace: Workspace) -> bytes:
        response = self.client.get(page.source_url)
        media_type = content_type_of(response)
        if not media_type.startswith("image"):
            raise InvalidContentError(page.source_url, media_type)

        data = normalize_image(response.content, url=page.source_url, quality=self.jpeg_quality)
        target = workspace.page_path(page.index)
        try:
            target.write_bytes(data)
        except OSError as exc:
            raise WorkspaceError(target, f"Could not write page {target}: {exc}") from exc
        LOGGER.debug("Saved page %d (%d bytes) to %s", page.index + 1, len(data), target)
        return data


__all__ = ["ImageFetcher", "normalize_image"]
