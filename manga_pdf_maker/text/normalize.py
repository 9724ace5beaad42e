"""Chapter name helpers."""

from __future__ import annotations

import math
import re

CHAPTER_TOKEN = "Chapter"
CHAPTER_NUMBER_RE = re.compile(r"Chapter (\d+(?:\.\d+)?)")
WHITESPACE_RE = re.compile(r"\s+")
UNSAFE_NAME_RE = re.compile(r"[^A-Za-z0-9 ]")
FALLBACK_NAME = "untitled"


def is_chapter_name(name: str) -> bool:
    return CHAPTER_TOKEN in name


def extract_order_key(name: str) -> float:
    """Return the chapter number embedded in *name*, or ``inf`` if absent."""

    match = CHAPTER_NUMBER_RE.search(name)
    return float(match.group(1)) if match else math.inf


def sanitize_name(name: str) -> str:
    """Reduce *name* to ASCII letters, digits and single spaces.

    The result is safe to use as a file or directory name and sanitizing it
    again returns it unchanged.
    """

    cleaned = UNSAFE_NAME_RE.sub("", WHITESPACE_RE.sub(" ", name))
    cleaned = WHITESPACE_RE.sub(" ", cleaned).strip()
    return cleaned or FALLBACK_NAME


__all__ = ["extract_order_key", "is_chapter_name", "sanitize_name"]
