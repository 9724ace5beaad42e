"""Per-chapter staging directories and PDF assembly."""

from __future__ import annotations

import io
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List

import img2pdf
from PIL import Image, UnidentifiedImageError
from pypdf import PdfWriter

from .errors import WorkspaceError
from .text.normalize import sanitize_name

LOGGER = logging.getLogger(__name__)

PAGE_NAME_WIDTH = 4
PAGE_SUFFIX = ".jpg"
PAGE_LAYOUT = img2pdf.get_fixed_dpi_layout_fun((72, 72))  # one pixel per point


@dataclass(frozen=True)
class Workspace:
    """Staging directory holding one normalized file per page."""

    chapter_name: str
    root_path: Path

    def page_path(self, index: int) -> Path:
        return self.root_path / f"{index + 1:0{PAGE_NAME_WIDTH}d}{PAGE_SUFFIX}"

    def destroy(self) -> None:
        try:
            shutil.rmtree(self.root_path)
        except FileNotFoundError:
            return
        except OSError as exc:
            raise WorkspaceError(self.root_path, f"Could not remove workspace {self.root_path}: {exc}") from exc
        LOGGER.debug("Removed workspace %s", self.root_path)


@dataclass
class Document:
    """A chapter PDF that has been written to disk."""

    name: str
    path: Path
    page_count: int
    skipped_indices: List[int] = field(default_factory=list)


class DocumentAssembler:
    """Bind staged page images into one PDF per chapter under ``output_root``."""

    def __init__(self, output_root: Path) -> None:
        self.output_root = Path(output_root)

    def document_path(self, chapter_name: str) -> Path:
        return self.output_root / f"{sanitize_name(chapter_name)}.pdf"

    def create_workspace(self, chapter_name: str) -> Workspace:
        """Create the staging directory for *chapter_name*.

        Any existing entry with the same name is treated as a conflict rather
        than reused, so stale pages from an earlier run never leak in.
        """

        name = sanitize_name(chapter_name)
        root = self.output_root / name
        if root.exists():
            raise WorkspaceError(root, f"Workspace {root} already exists; remove it and retry")
        try:
            root.mkdir(parents=True)
        except OSError as exc:
            raise WorkspaceError(root, f"Could not create workspace {root}: {exc}") from exc
        LOGGER.debug("Created workspace %s", root)
        return Workspace(chapter_name=name, root_path=root)

    def assemble(
        self,
        chapter_name: str,
        workspace: Workspace,
        expected_indices: Iterable[int],
    ) -> Document:
        name = sanitize_name(chapter_name)
        writer = PdfWriter()
        embedded = 0
        skipped: List[int] = []

        for index in expected_indices:
            page_path = workspace.page_path(index)
            if not page_path.exists():
                LOGGER.warning("File not found: %s, skipping page %d", page_path, index + 1)
                skipped.append(index)
                continue
            try:
                writer.append(io.BytesIO(_page_pdf_bytes(page_path)))
            except (
                img2pdf.ImageOpenError,
                Image.DecompressionBombError,
                UnidentifiedImageError,
                ValueError,
                OSError,
            ) as exc:
                LOGGER.warning("Unreadable page %s (%s), skipping page %d", page_path, exc, index + 1)
                skipped.append(index)
                continue
            embedded += 1

        if embedded == 0:
            LOGGER.warning("No pages could be embedded for %s; writing an empty document", name)

        writer.add_metadata({"/Title": name})
        output_path = self.document_path(name)
        try:
            self.output_root.mkdir(parents=True, exist_ok=True)
            with output_path.open("wb") as handle:
                writer.write(handle)
        except OSError as exc:
            raise WorkspaceError(output_path, f"Could not write {output_path}: {exc}") from exc

        workspace.destroy()
        LOGGER.info("Wrote %s (%d pages)", output_path, embedded)
        return Document(name=name, path=output_path, page_count=embedded, skipped_indices=skipped)


def _page_pdf_bytes(path: Path) -> bytes:
    """Wrap one staged JPEG in a single-page PDF at its pixel dimensions.

    img2pdf embeds the JPEG stream as is, so pages keep the quality chosen
    when they were normalized.
    """

    return img2pdf.convert(path.read_bytes(), layout_fun=PAGE_LAYOUT)


__all__ = ["Document", "DocumentAssembler", "Workspace"]
