"""Processing pipeline: feed normalization, keyword classification, geo hints."""

from .classify import TIERS, KeywordTier, classify_by_keyword
from .geo import GeoHub, GeoHubIndex, GeoLookup, GeoMatch
from .normalize import (
    MAX_ITEMS_PER_FEED,
    FeedFormat,
    FeedParseError,
    clean_html_to_text,
    normalize_feed,
    normalize_plain_text,
)

__all__ = [
    "TIERS",
    "KeywordTier",
    "classify_by_keyword",
    "GeoHub",
    "GeoHubIndex",
    "GeoLookup",
    "GeoMatch",
    "MAX_ITEMS_PER_FEED",
    "FeedFormat",
    "FeedParseError",
    "clean_html_to_text",
    "normalize_feed",
    "normalize_plain_text",
]
