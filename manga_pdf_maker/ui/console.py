"""Console chapter selection driven by discrete input tokens."""

from __future__ import annotations

import enum
import logging
from typing import Callable, List, Optional, Sequence

from ..converter import ChapterOutcome
from ..ingest import Chapter

LOGGER = logging.getLogger(__name__)

MENU = """Choose an option:
  1. Download all chapters at once
  2. Download chapters sequentially
  3. Download a particular chapter
  4. Quit (q)"""


class SessionState(enum.Enum):
    AWAITING_MODE = "awaiting-mode"
    AWAITING_CHAPTER_CHOICE = "awaiting-chapter-choice"
    PROCESSING = "processing"
    REPORTING = "reporting"
    DONE = "done"


class SelectionMode(enum.Enum):
    ALL = "1"
    SEQUENTIAL = "2"
    NAMED = "3"


class SelectionSession:
    """Finite-state chapter picker.

    ``feed`` consumes one token and returns the lines to show the user; the
    caller loops on ``prompt``/``feed`` until ``done``. Chapter failures are
    reported and the session keeps going.
    """

    def __init__(
        self,
        chapters: Sequence[Chapter],
        process: Callable[[Chapter], ChapterOutcome],
    ) -> None:
        self.chapters = list(chapters)
        self.process = process
        self.state = SessionState.AWAITING_MODE
        self.mode: Optional[SelectionMode] = None
        self.cursor = 0
        self.outcomes: List[ChapterOutcome] = []
        self.transitions: List[SessionState] = [self.state]

    @property
    def done(self) -> bool:
        return self.state is SessionState.DONE

    def prompt(self) -> str:
        if self.state is SessionState.AWAITING_MODE:
            return MENU
        if self.state is SessionState.AWAITING_CHAPTER_CHOICE:
            if self.mode is SelectionMode.SEQUENTIAL:
                chapter = self.chapters[self.cursor]
                return f"{chapter.display_name}: {chapter.source_url}\nDownload? (Y/n/q): "
            listing = "\n".join(f"{c.display_name}: {c.source_url}" for c in self.chapters)
            return f"Available chapters:\n{listing}\nEnter the name of the chapter to download (q to quit): "
        return ""

    def feed(self, token: str) -> List[str]:
        token = token.strip()
        if self.state is SessionState.AWAITING_MODE:
            return self._choose_mode(token)
        if self.state is SessionState.AWAITING_CHAPTER_CHOICE:
            if self.mode is SelectionMode.SEQUENTIAL:
                return self._confirm_next(token)
            return self._choose_named(token)
        return []

    # Transitions -----------------------------------------------------------------
    def _move(self, state: SessionState) -> None:
        LOGGER.debug("Session %s -> %s", self.state.value, state.value)
        self.state = state
        self.transitions.append(state)

    def _choose_mode(self, token: str) -> List[str]:
        lowered = token.lower()
        if lowered in {"4", "q"}:
            self._move(SessionState.DONE)
            return ["Exiting..."]
        try:
            self.mode = SelectionMode(lowered)
        except ValueError:
            return ["Invalid choice, please try again."]
        if not self.chapters:
            self._move(SessionState.DONE)
            return ["No chapters to download."]
        if self.mode is SelectionMode.ALL:
            messages = []
            for chapter in self.chapters:
                messages.extend(self._run(chapter))
            self._move(SessionState.DONE)
            return messages
        self.cursor = 0
        self._move(SessionState.AWAITING_CHAPTER_CHOICE)
        return []

    def _confirm_next(self, token: str) -> List[str]:
        answer = token.lower()
        if answer == "q":
            self._move(SessionState.DONE)
            return ["Exiting..."]
        messages: List[str] = []
        if answer in {"", "y", "yes"}:
            messages.extend(self._run(self.chapters[self.cursor]))
        self.cursor += 1
        if self.cursor >= len(self.chapters):
            self._move(SessionState.DONE)
        else:
            self._move(SessionState.AWAITING_CHAPTER_CHOICE)
        return messages

    def _choose_named(self, token: str) -> List[str]:
        if token.lower() == "q":
            self._move(SessionState.DONE)
            return ["Exiting..."]
        for chapter in self.chapters:
            if chapter.display_name == token:
                messages = self._run(chapter)
                self._move(SessionState.DONE)
                return messages
        return ["Chapter not found."]

    def _run(self, chapter: Chapter) -> List[str]:
        self._move(SessionState.PROCESSING)
        outcome = self.process(chapter)
        self.outcomes.append(outcome)
        if not outcome.success:
            self._move(SessionState.REPORTING)
        return [outcome.describe()]


__all__ = ["MENU", "SelectionMode", "SelectionSession", "SessionState"]
