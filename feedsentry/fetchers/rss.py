from __future__ import annotations

import asyncio
from typing import Optional
from urllib.parse import urlparse

import requests

from ..utils.logging import get_logger

logger = get_logger("fs.fetchers.rss")

_DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/127.0.0.0 Safari/537.36"
    ),
    "Accept": "application/rss+xml, application/atom+xml, application/xml;q=0.9, text/xml;q=0.8, */*;q=0.5",
}


class FeedFetchError(Exception):
    """Raised when a feed URL is missing or the server answers with an error."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _validated_url(url: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise FeedFetchError(f"Invalid URL for feed fetch: {url!r}")
    return url


def fetch_feed_document(
    url: str,
    *,
    timeout: float = 15,
    session: Optional[requests.Session] = None,
) -> bytes:
    """Download a feed document and return the raw body.

    Non-2xx responses and transport errors raise; parsing is left to
    :func:`feedsentry.processors.normalize.normalize_feed` so the raw bytes
    keep their declared encoding.
    """
    url = _validated_url(url)
    http = session or requests
    logger.debug("Fetching feed from %s", url)
    try:
        resp = http.get(url, headers=_DEFAULT_HEADERS, timeout=timeout)
    except requests.RequestException as exc:
        logger.debug("Feed request error for %s: %s", url, exc)
        raise FeedFetchError(f"Request failed for {url}: {exc}") from exc
    if not 200 <= resp.status_code < 300:
        raise FeedFetchError(f"HTTP {resp.status_code}", status_code=resp.status_code)
    return resp.content


async def fetch_feed_document_async(
    url: str,
    *,
    timeout: float = 15,
    session: Optional[requests.Session] = None,
) -> bytes:
    """Run :func:`fetch_feed_document` on a worker thread."""
    return await asyncio.to_thread(fetch_feed_document, url, timeout=timeout, session=session)
