"""Chapter discovery and page resolution for Manga PDF Maker."""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Chapter:
    """One installment of a title as listed on the title page."""

    display_name: str
    source_url: str
    order_key: float = math.inf


@dataclass(frozen=True)
class PageImage:
    """A page of a chapter, positioned by its order in the reader markup."""

    index: int
    source_url: str

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError("Page index must be non-negative")


@dataclass(frozen=True)
class SiteSelectors:
    """CSS selectors that locate chapters and reader images on the source site."""

    chapter_entry: str = ".chapter-name.text-nowrap"
    reader_image: str = ".container-chapter-reader img"


__all__ = ["Chapter", "PageImage", "SiteSelectors"]
