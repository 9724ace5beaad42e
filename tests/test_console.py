from __future__ import annotations

from manga_pdf_maker.converter import ChapterOutcome
from manga_pdf_maker.errors import ResolutionError
from manga_pdf_maker.ingest import Chapter
from manga_pdf_maker.ui.console import SelectionSession, SessionState

CHAPTERS = [
    Chapter("Chapter 1", "https://example.test/1", 1.0),
    Chapter("Chapter 2", "https://example.test/2", 2.0),
    Chapter("Chapter 3", "https://example.test/3", 3.0),
]


class RecordingProcessor:
    def __init__(self, failing=()):
        self.processed = []
        self.failing = set(failing)

    def __call__(self, chapter):
        self.processed.append(chapter.display_name)
        if chapter.display_name in self.failing:
            return ChapterOutcome(chapter=chapter, error=ResolutionError("boom"))
        return ChapterOutcome(chapter=chapter)


def test_mode_all_processes_every_chapter_and_reports_failures():
    processor = RecordingProcessor(failing={"Chapter 2"})
    session = SelectionSession(CHAPTERS, processor)

    messages = session.feed("1")

    assert processor.processed == ["Chapter 1", "Chapter 2", "Chapter 3"]
    assert session.done
    assert any("Failed Chapter 2" in m and "ResolutionError" in m for m in messages)
    assert SessionState.REPORTING in session.transitions
    assert [o.success for o in session.outcomes] == [True, False, True]


def test_sequential_mode_confirms_each_chapter():
    processor = RecordingProcessor()
    session = SelectionSession(CHAPTERS, processor)

    session.feed("2")
    assert session.state is SessionState.AWAITING_CHAPTER_CHOICE
    assert "Chapter 1" in session.prompt()
    session.feed("y")
    session.feed("n")
    assert "Chapter 3" in session.prompt()
    session.feed("Y")

    assert processor.processed == ["Chapter 1", "Chapter 3"]
    assert session.done


def test_sequential_quit_stops_new_chapters():
    processor = RecordingProcessor()
    session = SelectionSession(CHAPTERS, processor)

    session.feed("2")
    session.feed("y")
    messages = session.feed("q")

    assert processor.processed == ["Chapter 1"]
    assert messages == ["Exiting..."]
    assert session.done


def test_named_mode_retries_until_found():
    processor = RecordingProcessor()
    session = SelectionSession(CHAPTERS, processor)

    session.feed("3")
    assert "Available chapters" in session.prompt()
    assert session.feed("Chapter 9") == ["Chapter not found."]
    assert not session.done
    session.feed("Chapter 2")

    assert processor.processed == ["Chapter 2"]
    assert session.done


def test_invalid_mode_keeps_waiting_and_quit_ends():
    session = SelectionSession(CHAPTERS, RecordingProcessor())

    assert session.feed("7") == ["Invalid choice, please try again."]
    assert session.state is SessionState.AWAITING_MODE
    assert session.feed("Q") == ["Exiting..."]
    assert session.transitions == [SessionState.AWAITING_MODE, SessionState.DONE]


def test_empty_catalog_finishes_immediately():
    session = SelectionSession([], RecordingProcessor())

    assert session.feed("1") == ["No chapters to download."]
    assert session.done
