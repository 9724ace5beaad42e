from __future__ import annotations

import io
import sys
import threading
import time
from pathlib import Path
from typing import Dict, List, Optional, Union

import pytest
import requests
from PIL import Image

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from manga_pdf_maker.http import HttpClient  # noqa: E402


class FakeResponse:
    def __init__(
        self,
        *,
        status_code: int = 200,
        content: bytes = b"",
        content_type: Optional[str] = "text/html; charset=utf-8",
    ) -> None:
        self.status_code = status_code
        self.content = content
        self.headers: Dict[str, str] = {}
        if content_type is not None:
            self.headers["Content-Type"] = content_type

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


Route = Union[FakeResponse, Exception, List[Union[FakeResponse, Exception]]]


class FakeSession:
    """In-memory stand-in for ``requests.Session`` keyed by URL."""

    def __init__(self, routes: Dict[str, Route], delays: Optional[Dict[str, float]] = None) -> None:
        self.routes = routes
        self.delays = delays or {}
        self.headers: Dict[str, str] = {}
        self.calls: List[str] = []
        self.completed: List[str] = []
        self._lock = threading.Lock()

    def get(self, url, headers=None, timeout=None):
        with self._lock:
            self.calls.append(url)
            route = self.routes.get(url)
            if isinstance(route, list):
                route = route.pop(0) if len(route) > 1 else route[0]
        if url in self.delays:
            time.sleep(self.delays[url])
        with self._lock:
            self.completed.append(url)
        if route is None:
            return FakeResponse(status_code=404, content=b"not found")
        if isinstance(route, Exception):
            raise route
        return route


def image_bytes(width: int = 20, height: int = 30, fmt: str = "PNG", mode: str = "RGB") -> bytes:
    color = (200, 40, 40, 128) if mode == "RGBA" else (200, 40, 40)
    buffer = io.BytesIO()
    Image.new(mode, (width, height), color).save(buffer, format=fmt)
    return buffer.getvalue()


def image_response(width: int = 20, height: int = 30, fmt: str = "PNG") -> FakeResponse:
    return FakeResponse(content=image_bytes(width, height, fmt), content_type=f"image/{fmt.lower()}")


def html_response(body: str) -> FakeResponse:
    return FakeResponse(content=f"<html><body>{body}</body></html>".encode("utf-8"))


def reader_page(urls: List[str]) -> FakeResponse:
    images = "".join(f'<img src="{url}" alt="page">' for url in urls)
    return html_response(f'<div class="container-chapter-reader">{images}</div><img src="/ad.png">')


def make_client(session: FakeSession, **kwargs) -> HttpClient:
    kwargs.setdefault("sleep", lambda seconds: None)
    return HttpClient(session=session, **kwargs)


@pytest.fixture
def output_root(tmp_path: Path) -> Path:
    root = tmp_path / "out"
    root.mkdir()
    return root
