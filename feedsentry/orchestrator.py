from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

import requests

from .fetchers import BreakerState, FeedFetchError, ResilientFeedFetcher, fetch_feed_document_async
from .models import FeedDescriptor, FeedScope, NewsItem
from .processors import GeoLookup, normalize_feed
from .processors.ai import AIDispatchQueue, apply_ai_result, select_ai_candidates
from .utils.logging import get_logger
from .utils.pipeline_config import PipelineConfig

logger = get_logger("fs.orchestrator")

BatchCallback = Callable[[List[NewsItem]], None]
ReclassifiedCallback = Callable[[NewsItem], None]


def chunked(items: Sequence[FeedDescriptor], size: int) -> List[List[FeedDescriptor]]:
    size = max(1, size)
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class _TopItems:
    """Bounded min-heap keeping the newest ``limit`` items seen."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.total = 0
        self._heap: List[Tuple[float, int, NewsItem]] = []
        self._seq = itertools.count()

    def add(self, item: NewsItem) -> None:
        self.total += 1
        entry = (item.pub_date.timestamp(), next(self._seq), item)
        if len(self._heap) < self.limit:
            heapq.heappush(self._heap, entry)
        elif entry[0] > self._heap[0][0]:
            heapq.heapreplace(self._heap, entry)

    def newest_first(self) -> List[NewsItem]:
        return [item for _, _, item in sorted(self._heap, key=lambda e: e[0], reverse=True)]


class FeedOrchestrator:
    """Fetches feeds through the resilience layer and escalates headlines.

    Remote classification results land on the already-returned ``NewsItem``
    objects; ``on_reclassified`` is called for every item whose
    classification was replaced, so consumers can re-render.
    """

    def __init__(
        self,
        fetcher: ResilientFeedFetcher,
        dispatcher: Optional[AIDispatchQueue] = None,
        *,
        lang: str = "en",
        variant: str = "full",
        geo_lookup: Optional[GeoLookup] = None,
        http_timeout: float = 15,
        session: Optional[requests.Session] = None,
        on_reclassified: Optional[ReclassifiedCallback] = None,
        max_ai_per_feed: Optional[int] = None,
    ) -> None:
        self.fetcher = fetcher
        self.dispatcher = dispatcher
        self.lang = lang
        self.variant = variant
        self.geo_lookup = geo_lookup
        self.http_timeout = http_timeout
        self.session = session
        self.on_reclassified = on_reclassified
        self.max_ai_per_feed = (
            max_ai_per_feed if max_ai_per_feed is not None else PipelineConfig.ai_max_per_feed(variant)
        )
        self._escalations: Set["asyncio.Task[None]"] = set()

    def scope_for(self, feed: FeedDescriptor) -> FeedScope:
        return FeedScope(feed_name=feed.name, lang=self.lang)

    async def _download_and_normalize(self, feed: FeedDescriptor) -> List[NewsItem]:
        url = feed.resolve_url(self.lang)
        if not url:
            raise FeedFetchError(f"No URL found for feed {feed.name}")
        document = await fetch_feed_document_async(url, timeout=self.http_timeout, session=self.session)
        items = normalize_feed(document, feed, variant=self.variant, geo_lookup=self.geo_lookup)
        self._escalate(items)
        return items

    async def fetch_feed(self, feed: FeedDescriptor) -> List[NewsItem]:
        """Items for one feed; never raises for source failures."""
        return await self.fetcher.fetch_with_resilience(
            self.scope_for(feed), lambda: self._download_and_normalize(feed)
        )

    def _escalate(self, items: Iterable[NewsItem]) -> None:
        if self.dispatcher is None:
            return
        for item in select_ai_candidates(items, self.max_ai_per_feed):
            if not self.dispatcher.can_queue(item.title):
                continue
            task = asyncio.ensure_future(self._await_ai(item))
            self._escalations.add(task)
            task.add_done_callback(self._escalations.discard)

    async def _await_ai(self, item: NewsItem) -> None:
        result = await self.dispatcher.submit(item.title, self.variant)
        if apply_ai_result(item, result):
            logger.debug("Reclassified '%s' as %s (%.2f)", item.title, item.threat.level.value, item.threat.confidence)
            if self.on_reclassified is not None:
                try:
                    self.on_reclassified(item)
                except Exception:  # noqa: BLE001 - a consumer callback must not break dispatch
                    logger.exception("on_reclassified callback failed for '%s'", item.title)

    async def fetch_category_feeds(
        self,
        feeds: Iterable[FeedDescriptor],
        *,
        batch_size: int = 5,
        on_batch: Optional[BatchCallback] = None,
        top_limit: int = 20,
    ) -> List[NewsItem]:
        """Fetch many feeds chunk by chunk, reporting partial results.

        Feeds pinned to another language are skipped. Feeds inside a chunk
        are fetched concurrently; ``on_batch`` receives the current newest
        ``top_limit`` items after every chunk.
        """
        selected = [f for f in feeds if not f.lang or f.lang == self.lang]
        top = _TopItems(top_limit)

        for chunk in chunked(selected, batch_size):
            results = await asyncio.gather(*(self.fetch_feed(feed) for feed in chunk))
            for items in results:
                for item in items:
                    top.add(item)
            if on_batch is not None:
                on_batch(top.newest_first())

        logger.info("Fetched %d items from %d feeds (%s)", top.total, len(selected), self.lang)
        return top.newest_first()

    def feed_failures(self) -> Dict[str, BreakerState]:
        return self.fetcher.breaker.failures_for_language(self.lang)

    async def drain_escalations(self) -> None:
        """Wait for every outstanding remote classification to settle."""
        while self._escalations:
            await asyncio.gather(*list(self._escalations), return_exceptions=True)

    async def aclose(self) -> None:
        if self.dispatcher is not None:
            await self.dispatcher.aclose()
        await self.drain_escalations()
