from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Callable, Optional, Protocol


class Cancellable(Protocol):
    def cancel(self) -> None:
        ...


class DispatchScheduler(ABC):
    """Timer seam for the dispatcher.

    Holds at most one flush timer; ``arm`` while armed is a no-op. One-off
    timers (e.g. resuming after backpressure) go through ``call_later``.
    """

    @property
    @abstractmethod
    def armed(self) -> bool:
        ...

    @abstractmethod
    def arm(self, delay: float, callback: Callable[[], None]) -> None:
        ...

    @abstractmethod
    def cancel(self) -> None:
        ...

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable:
        ...


class AsyncioScheduler(DispatchScheduler):
    """Scheduler backed by the running event loop's ``call_later``."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    @property
    def armed(self) -> bool:
        return self._handle is not None

    def arm(self, delay: float, callback: Callable[[], None]) -> None:
        if self._handle is not None:
            return

        def _fire() -> None:
            self._handle = None
            callback()

        self._handle = self._get_loop().call_later(delay, _fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable:
        return self._get_loop().call_later(delay, callback)
