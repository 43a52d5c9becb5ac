"""Feed fetching layer: network access, circuit breaking and caching."""

from .cache import CacheEntry, FeedCache
from .circuit_breaker import BreakerState, FeedCircuitBreaker
from .resilience import ResilientFeedFetcher
from .rss import FeedFetchError, fetch_feed_document, fetch_feed_document_async

__all__ = [
    "BreakerState",
    "CacheEntry",
    "FeedCache",
    "FeedCircuitBreaker",
    "FeedFetchError",
    "ResilientFeedFetcher",
    "fetch_feed_document",
    "fetch_feed_document_async",
]
