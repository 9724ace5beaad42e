"""Exception hierarchy shared by the chapter pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class MangaPdfError(Exception):
    """Base class for predictable pipeline failures.

    The orchestrator catches this type and reports it per chapter; anything
    else is a bug and propagates.
    """

    @property
    def kind(self) -> str:
        return type(self).__name__


class TransportError(MangaPdfError):
    """An HTTP request failed after all retries."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class DiscoveryError(MangaPdfError):
    """The chapter listing could not be fetched or was not HTML."""


class ResolutionError(MangaPdfError):
    """Page links for a chapter could not be resolved."""


class InvalidContentError(MangaPdfError):
    """A page retrieval returned something that is not an image."""

    def __init__(self, url: str, content_type: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"Invalid content type {content_type!r} for {url}")
        self.url = url
        self.content_type = content_type


class WorkspaceError(MangaPdfError):
    """The staging directory or output file could not be managed."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(message)
        self.path = path


__all__ = [
    "DiscoveryError",
    "InvalidContentError",
    "MangaPdfError",
    "ResolutionError",
    "TransportError",
    "WorkspaceError",
]
