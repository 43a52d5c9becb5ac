"""Batched, rate-limited dispatch of headlines to the remote classifier.

Headlines are admitted against a rolling per-window cap and a per-title
dedup window, queued, and flushed in batches of concurrent RPCs on a single
cooperative timer. A rate-limit or server error pauses the whole queue:
everything still pending resolves to ``None`` and flushing resumes after a
cooldown. Callers keep their keyword classification whenever the result is
``None``.
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Iterable, List, Optional, Set

from ...models import NewsItem
from ...models.threat import ClassificationSource, ThreatClassification
from ...utils.logging import get_logger
from .base import ClassificationApiError, ClassificationClient
from .parsing import to_threat
from .scheduler import AsyncioScheduler, Cancellable, DispatchScheduler

logger = get_logger("fs.ai.dispatcher")

BATCH_SIZE = 20
BATCH_DELAY_SECONDS = 0.5
WINDOW_SECONDS = 60.0
DEDUP_SECONDS = 30 * 60.0
RATE_LIMIT_PAUSE_SECONDS = 60.0
SERVER_ERROR_PAUSE_SECONDS = 30.0


def dedup_key(title: str) -> str:
    return " ".join(title.strip().lower().split())


@dataclass(slots=True)
class DispatchJob:
    title: str
    variant: str
    future: "asyncio.Future[Optional[ThreatClassification]]"

    def resolve(self, result: Optional[ThreatClassification]) -> None:
        if not self.future.done():
            self.future.set_result(result)


class AIDispatchQueue:
    def __init__(
        self,
        client: ClassificationClient,
        *,
        scheduler: Optional[DispatchScheduler] = None,
        max_per_window: int = 80,
        window_seconds: float = WINDOW_SECONDS,
        dedup_seconds: float = DEDUP_SECONDS,
        batch_size: int = BATCH_SIZE,
        batch_delay: float = BATCH_DELAY_SECONDS,
        rate_limit_pause: float = RATE_LIMIT_PAUSE_SECONDS,
        server_error_pause: float = SERVER_ERROR_PAUSE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.scheduler = scheduler or AsyncioScheduler()
        self.max_per_window = max_per_window
        self.window_seconds = window_seconds
        self.dedup_seconds = dedup_seconds
        self.batch_size = max(1, batch_size)
        self.batch_delay = batch_delay
        self.rate_limit_pause = rate_limit_pause
        self.server_error_pause = server_error_pause
        self._clock = clock

        self._queue: Deque[DispatchJob] = deque()
        self._dispatches: Deque[float] = deque()
        self._recently_queued: Dict[str, float] = {}
        self._flush_scheduled = False
        self._paused = False
        self._resume_handle: Optional[Cancellable] = None
        self._tasks: Set["asyncio.Task[int]"] = set()

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def pending(self) -> int:
        return len(self._queue)

    def can_queue(self, title: str) -> bool:
        """Admission check; records the dispatch when the title is admitted."""
        now = self._clock()
        while self._dispatches and now - self._dispatches[0] > self.window_seconds:
            self._dispatches.popleft()
        for key in [k for k, at in self._recently_queued.items() if now - at > self.dedup_seconds]:
            del self._recently_queued[key]

        if len(self._dispatches) >= self.max_per_window:
            return False
        key = dedup_key(title)
        last = self._recently_queued.get(key)
        if last is not None and now - last < self.dedup_seconds:
            return False

        self._dispatches.append(now)
        self._recently_queued[key] = now
        return True

    def request_classification(
        self, title: str, variant: str = "full"
    ) -> "asyncio.Future[Optional[ThreatClassification]]":
        """Queue a headline for remote classification.

        The returned future resolves to the mapped classification, or to
        ``None`` right away when admission is refused, and to ``None`` later
        on any RPC failure.
        """
        if not self.can_queue(title):
            future: "asyncio.Future[Optional[ThreatClassification]]" = asyncio.get_running_loop().create_future()
            future.set_result(None)
            return future
        return self.submit(title, variant)

    def submit(self, title: str, variant: str = "full") -> "asyncio.Future[Optional[ThreatClassification]]":
        """Enqueue an already-admitted headline (see :meth:`can_queue`)."""
        future: "asyncio.Future[Optional[ThreatClassification]]" = asyncio.get_running_loop().create_future()
        self._queue.append(DispatchJob(title=title, variant=variant, future=future))
        self._schedule()
        return future

    def _schedule(self) -> None:
        if self._paused or self._flush_scheduled or not self._queue:
            return
        if len(self._queue) >= self.batch_size:
            self.scheduler.cancel()
            self._start_flush()
        elif not self.scheduler.armed:
            self.scheduler.arm(self.batch_delay, self._start_flush)

    def _start_flush(self) -> None:
        self._flush_scheduled = True
        task = asyncio.ensure_future(self.flush())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def flush(self) -> int:
        """Send up to one batch concurrently; returns how many jobs were sent."""
        self._flush_scheduled = False
        if self._paused or not self._queue:
            return 0
        self.scheduler.cancel()

        batch: List[DispatchJob] = []
        while self._queue and len(batch) < self.batch_size:
            batch.append(self._queue.popleft())

        logger.debug("Dispatching %d classification requests", len(batch))
        await asyncio.gather(*(self._run_job(job) for job in batch))
        self._schedule()
        return len(batch)

    async def _run_job(self, job: DispatchJob) -> None:
        try:
            response = await self.client.classify_event_async(job.title)
            result = to_threat(response)
        except ClassificationApiError as exc:
            if exc.trips_backpressure:
                self._pause(exc)
            else:
                logger.debug("Classification rejected for '%s': %s", job.title, exc)
            result = None
        except Exception as exc:  # noqa: BLE001 - the keyword classification stays in place
            logger.debug("Classification failed for '%s': %s", job.title, exc)
            result = None
        job.resolve(result)

    def _drain(self) -> int:
        drained = 0
        while self._queue:
            self._queue.popleft().resolve(None)
            drained += 1
        return drained

    def _pause(self, error: ClassificationApiError) -> None:
        delay = self.rate_limit_pause if error.is_rate_limited else self.server_error_pause
        drained = self._drain()
        if self._paused:
            return
        self._paused = True
        self.scheduler.cancel()
        logger.warning(
            "Classification API returned %s; pausing AI classification for %ds (dropped %d queued)",
            error.status_code,
            delay,
            drained,
        )
        self._resume_handle = self.scheduler.call_later(delay, self._resume)

    def _resume(self) -> None:
        self._paused = False
        self._resume_handle = None
        logger.info("Resuming AI classification (%d queued)", len(self._queue))
        self._schedule()

    async def aclose(self) -> None:
        """Cancel timers, resolve anything still queued to ``None``, await in-flight batches."""
        self.scheduler.cancel()
        if self._resume_handle is not None:
            self._resume_handle.cancel()
            self._resume_handle = None
        self._drain()
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self.client.close()


def select_ai_candidates(items: Iterable[NewsItem], max_per_feed: int) -> List[NewsItem]:
    """Keyword-classified items of one feed, newest first, capped at ``max_per_feed``."""
    candidates = [item for item in items if item.threat.source is ClassificationSource.KEYWORD]
    candidates.sort(key=lambda item: item.pub_date, reverse=True)
    return candidates[: max(0, max_per_feed)]


def apply_ai_result(item: NewsItem, result: Optional[ThreatClassification]) -> bool:
    """Replace the item's classification only on strictly higher confidence."""
    if result is None or result.confidence <= item.threat.confidence:
        return False
    item.threat = result
    item.is_alert = result.is_alert
    return True
