from __future__ import annotations

import math

import pytest

from manga_pdf_maker.ingest import Chapter
from manga_pdf_maker.ingest.catalog import sort_chapters
from manga_pdf_maker.text.normalize import extract_order_key, is_chapter_name, sanitize_name


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Chapter 12", 12.0),
        ("Vol.2 Chapter 12.5: Return", 12.5),
        ("Chapter 3.25", 3.25),
        ("Chapter Special", math.inf),
        ("chapter 4", math.inf),
    ],
)
def test_extract_order_key(name, expected):
    assert extract_order_key(name) == expected


def test_sort_places_unnumbered_last_in_original_order():
    names = ["Chapter 2", "Special", "Chapter 1.5", "Chapter 10"]
    chapters = [Chapter(n, f"https://example.test/{i}", extract_order_key(n)) for i, n in enumerate(names)]

    ordered = sort_chapters(chapters)

    assert [c.display_name for c in ordered] == ["Chapter 1.5", "Chapter 2", "Chapter 10", "Special"]


def test_sanitize_keeps_letters_digits_and_spaces():
    cleaned = sanitize_name("Chapter 10: The Fall!")

    assert cleaned == "Chapter 10 The Fall"
    assert all(ch.isalnum() or ch == " " for ch in cleaned)
    assert sanitize_name(cleaned) == cleaned


def test_sanitize_falls_back_when_nothing_is_left():
    assert sanitize_name("?!/") == "untitled"
    assert sanitize_name(sanitize_name("?!/")) == "untitled"


def test_is_chapter_name_is_case_sensitive():
    assert is_chapter_name("Chapter 1")
    assert not is_chapter_name("chapter 1")
    assert not is_chapter_name("Volume 1")


def test_sanitize_collapses_whitespace_and_drops_non_ascii():
    cleaned = sanitize_name("Chapter\t12\n  The \u017fword \u212a!")

    assert cleaned == "Chapter 12 The word"
    assert sanitize_name(cleaned) == cleaned
    assert set(cleaned) <= set("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789 ")


def test_sanitize_leaves_single_spaces_where_symbols_were_removed():
    cleaned = sanitize_name("Vol. 2 - Chapter 3")

    assert cleaned == "Vol 2 Chapter 3"
    assert sanitize_name(cleaned) == cleaned
