"""Thin ``requests`` wrapper with browser headers, timeouts and retries."""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Optional

import requests

from .errors import TransportError

LOGGER = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)

RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class HttpClient:
    """Issue GET requests through a shared session.

    Connection failures, timeouts and retryable status codes are retried with
    exponential backoff. Exhausted retries and non-retryable HTTP errors are
    raised as :class:`TransportError`.
    """

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
        retries: int = 3,
        backoff: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not user_agent:
            raise ValueError("user_agent must not be empty")
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "User-Agent": user_agent,
                "Accept": "text/html,application/xhtml+xml,image/avif,image/webp,*/*;q=0.8",
            }
        )
        self.timeout = timeout
        self.retries = retries
        self.backoff = backoff
        self._sleep = sleep

    def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> requests.Response:
        attempt = 0
        while True:
            try:
                LOGGER.debug("GET %s", url)
                response = self.session.get(url, headers=headers, timeout=self.timeout)
                response.raise_for_status()
                return response
            except requests.HTTPError as exc:
                status = exc.response.status_code if exc.response is not None else None
                if status not in RETRYABLE_STATUS or attempt >= self.retries:
                    raise TransportError(url, f"HTTP {status} for {url}", status_code=status) from exc
                error: Exception = exc
            except (requests.ConnectionError, requests.Timeout) as exc:
                if attempt >= self.retries:
                    raise TransportError(url, f"Request to {url} failed: {exc}") from exc
                error = exc
            except requests.RequestException as exc:
                raise TransportError(url, f"Request to {url} failed: {exc}") from exc

            attempt += 1
            delay = self.backoff * (2 ** (attempt - 1))
            LOGGER.warning(
                "Transient error for %s: %s; retrying in %.1fs (attempt %d/%d)",
                url,
                error,
                delay,
                attempt,
                self.retries,
            )
            self._sleep(delay)


def content_type_of(response: requests.Response) -> str:
    """Return the lower-cased media type of *response* without parameters."""

    raw = response.headers.get("Content-Type") or ""
    return raw.split(";", 1)[0].strip().lower()


__all__ = ["DEFAULT_USER_AGENT", "HttpClient", "content_type_of"]
