from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict

from ..models import FeedScope
from ..utils.logging import get_logger

logger = get_logger("fs.fetchers.breaker")

FEED_COOLDOWN_SECONDS = 5 * 60
MAX_FAILURES = 2


@dataclass(slots=True)
class BreakerState:
    count: int = 0
    # Epoch seconds; 0 while still counting towards the threshold
    cooldown_until: float = 0.0


class FeedCircuitBreaker:
    """Per-scope consecutive-failure counter with a fixed cooldown.

    Usage:
        breaker = FeedCircuitBreaker()
        if not breaker.is_on_cooldown(scope):
            try:
                items = await fetch()
                breaker.record_success(scope)
            except Exception:
                breaker.record_failure(scope)

    Expired cooldowns clear themselves on the next check; no timer runs.
    """

    def __init__(
        self,
        *,
        threshold: int = MAX_FAILURES,
        cooldown_seconds: float = FEED_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.threshold = threshold
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._states: Dict[FeedScope, BreakerState] = {}

    def __len__(self) -> int:
        return len(self._states)

    def state(self, scope: FeedScope) -> BreakerState | None:
        return self._states.get(scope)

    def is_on_cooldown(self, scope: FeedScope) -> bool:
        state = self._states.get(scope)
        if state is None:
            return False
        if self._clock() < state.cooldown_until:
            return True
        if state.cooldown_until > 0:
            del self._states[scope]
        return False

    def record_failure(self, scope: FeedScope) -> BreakerState:
        state = self._states.setdefault(scope, BreakerState())
        state.count += 1
        if state.count >= self.threshold:
            state.cooldown_until = self._clock() + self.cooldown_seconds
            logger.warning(
                "%s (%s) on cooldown for %ds after %d failures",
                scope.feed_name,
                scope.lang,
                self.cooldown_seconds,
                state.count,
            )
        return state

    def record_success(self, scope: FeedScope) -> None:
        self._states.pop(scope, None)

    def failures_for_language(self, lang: str) -> Dict[str, BreakerState]:
        """Failure states of one UI language, keyed by feed name."""
        return {scope.feed_name: state for scope, state in self._states.items() if scope.lang == lang}

    def sweep(self) -> int:
        """Drop states whose cooldown has lapsed; returns how many were removed."""
        now = self._clock()
        expired = [s for s, st in self._states.items() if st.cooldown_until > 0 and now > st.cooldown_until]
        for scope in expired:
            del self._states[scope]
        return len(expired)
