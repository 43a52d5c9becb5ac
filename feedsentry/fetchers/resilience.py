from __future__ import annotations

from typing import Awaitable, Callable, List, Optional

from ..models import FeedScope, NewsItem
from ..utils.logging import get_logger
from .cache import FeedCache
from .circuit_breaker import FeedCircuitBreaker

logger = get_logger("fs.fetchers.resilience")

NetworkFn = Callable[[], Awaitable[List[NewsItem]]]


class ResilientFeedFetcher:
    """Wraps a per-scope network fetch with caching and circuit breaking.

    ``fetch_with_resilience`` never raises for a failing fetch: it degrades to
    the in-memory entry, then the durable cache, then an empty list.
    """

    def __init__(self, cache: FeedCache, breaker: Optional[FeedCircuitBreaker] = None) -> None:
        self.cache = cache
        self.breaker = breaker or FeedCircuitBreaker()

    async def fallback(self, scope: FeedScope) -> List[NewsItem]:
        entry = self.cache.get(scope)
        if entry is not None:
            return list(entry.items)
        return await self.cache.load_durable(scope) or []

    async def fetch_with_resilience(self, scope: FeedScope, network_fn: NetworkFn) -> List[NewsItem]:
        if self.cache.needs_sweep():
            self.cache.sweep()
            self.breaker.sweep()

        if self.breaker.is_on_cooldown(scope):
            return await self.fallback(scope)

        fresh = self.cache.get_fresh(scope)
        if fresh is not None:
            return list(fresh.items)

        try:
            items = await network_fn()
        except Exception as exc:  # noqa: BLE001 - transient source failures are absorbed
            logger.warning("Failed to fetch %s (%s): %s", scope.feed_name, scope.lang, exc)
            self.breaker.record_failure(scope)
            return await self.fallback(scope)

        self.cache.put(scope, items)
        self.breaker.record_success(scope)
        await self.cache.store_durable(scope, items)
        return list(items)
