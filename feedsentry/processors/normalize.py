from __future__ import annotations

import html
import re
import unicodedata
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional

import feedparser
from bs4 import BeautifulSoup

from ..models import FeedDescriptor, NewsItem
from ..utils.logging import get_logger
from .classify import classify_by_keyword
from .geo import GeoLookup

MAX_ITEMS_PER_FEED = 5

_whitespace_re = re.compile(r"\s+")
_control_chars_re = re.compile(r"[\u0000-\u0008\u000B\u000C\u000E-\u001F\u007F]")

_PUNCT_TRANSLATION = {
    ord("\u2018"): "'",  # left single quote
    ord("\u2019"): "'",  # right single quote
    ord("\u201C"): '"',  # left double quote
    ord("\u201D"): '"',  # right double quote
    ord("\u2013"): "-",  # en dash
    ord("\u2014"): "-",  # em dash
    ord("\u00A0"): " ",  # non-breaking space
}

_logger = get_logger("fs.processors.normalize")


class FeedParseError(Exception):
    """Raised when a fetched document cannot be parsed as RSS or Atom."""


class FeedFormat(str, Enum):
    RSS = "rss"
    ATOM = "atom"


def clean_html_to_text(raw_html: str | None) -> str:
    """Clean HTML to normalized plain text.

    - Strip tags
    - Unescape HTML entities
    - Collapse whitespace
    """
    if not raw_html:
        return ""
    if "<" not in raw_html and "&" not in raw_html:
        return _whitespace_re.sub(" ", raw_html).strip()

    soup = BeautifulSoup(raw_html, "html.parser")
    text = soup.get_text(" ")
    text = html.unescape(text)
    text = _whitespace_re.sub(" ", text)
    return text.strip()


def normalize_plain_text(text: str | None) -> str:
    """Normalize plain text for matching and display.

    - Strip BOM
    - Replace curly quotes/dashes and non-breaking spaces
    - Unicode normalize (NFKC)
    - Remove control characters and collapse whitespace
    """
    if not text:
        return ""

    if text.startswith("\ufeff"):
        text = text.lstrip("\ufeff")

    text = text.translate(_PUNCT_TRANSLATION)
    text = unicodedata.normalize("NFKC", text)
    text = _control_chars_re.sub(" ", text)
    return _whitespace_re.sub(" ", text).strip()


def detect_format(parsed: Any) -> FeedFormat:
    # feedparser reports 'rss20', 'rss10', 'atom10', ... ; no <item> means Atom
    version = getattr(parsed, "version", "") or ""
    return FeedFormat.RSS if version.startswith("rss") else FeedFormat.ATOM


def _struct_to_datetime(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime(*value[:6], tzinfo=timezone.utc)
    except (TypeError, ValueError):
        return None


def parse_entry_date(entry: Any, fmt: FeedFormat, *, now: datetime) -> datetime:
    """Publish date of an entry, or ``now`` when missing or unparsable."""
    keys = ("published_parsed",) if fmt is FeedFormat.RSS else ("published_parsed", "updated_parsed")
    for key in keys:
        parsed = _struct_to_datetime(entry.get(key))
        if parsed is not None:
            return parsed
    return now


def _entry_link(entry: Any, fmt: FeedFormat) -> str:
    if fmt is FeedFormat.ATOM:
        for link in entry.get("links") or []:
            href = link.get("href")
            if href:
                return href
        return ""
    return entry.get("link") or ""


def parse_document(document: str | bytes) -> Any:
    # feedparser treats str input as a possible URL or path; bytes are parsed as-is
    if isinstance(document, str):
        document = document.encode("utf-8")
    parsed = feedparser.parse(document)
    # The loose parser recovers entries from broken XML; any error other than
    # a declared-vs-detected encoding mismatch fails the whole document
    error = getattr(parsed, "bozo_exception", None)
    if getattr(parsed, "bozo", False) and not isinstance(error, feedparser.CharacterEncodingOverride):
        raise FeedParseError(f"Malformed feed document: {error or 'unknown error'}")
    entries = getattr(parsed, "entries", None) or []
    if not getattr(parsed, "version", "") and not entries:
        raise FeedParseError("Document is neither RSS nor Atom")
    return parsed


def normalize_feed(
    document: str | bytes,
    feed: FeedDescriptor,
    *,
    variant: str = "full",
    geo_lookup: Optional[GeoLookup] = None,
    now: Optional[datetime] = None,
) -> List[NewsItem]:
    """Turn a fetched RSS/Atom document into classified ``NewsItem`` objects.

    Only the first ``MAX_ITEMS_PER_FEED`` entries (feeds list newest first)
    are kept. Raises ``FeedParseError`` when the document is not a feed.
    """
    parsed = parse_document(document)
    fmt = detect_format(parsed)
    now = now or datetime.now(timezone.utc)

    items: List[NewsItem] = []
    for entry in parsed.entries[:MAX_ITEMS_PER_FEED]:
        title = normalize_plain_text(clean_html_to_text(entry.get("title")))
        threat = classify_by_keyword(title, variant)
        item = NewsItem(
            source=feed.name,
            title=title,
            link=_entry_link(entry, fmt).strip(),
            pub_date=parse_entry_date(entry, fmt, now=now),
            threat=threat,
            is_alert=threat.is_alert,
            lang=feed.lang,
        )
        if geo_lookup is not None and title:
            matches = geo_lookup.lookup(title)
            if matches:
                hub = matches[0].hub
                item.lat, item.lon, item.location_name = hub.lat, hub.lon, hub.name
        items.append(item)

    _logger.debug("Normalized %d %s entries from %s", len(items), fmt.value, feed.name)
    return items
