"""Download web-published manga chapters as one PDF per chapter."""

from __future__ import annotations

from .converter import ChapterConverter, ChapterOutcome, ConversionOptions, ConversionResult
from .ingest import Chapter

__all__ = [
    "Chapter",
    "ChapterConverter",
    "ChapterOutcome",
    "ConversionOptions",
    "ConversionResult",
]

__version__ = "0.1.0"
