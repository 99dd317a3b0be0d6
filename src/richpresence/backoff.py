"""Reconnect backoff policy and the one-shot timer that drives retries."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol, TypeAlias

from richpresence.limits import RECONNECT_MAX_DELAY_MS, RECONNECT_MIN_DELAY_MS

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


CallLater: TypeAlias = Callable[[float, Callable[[], None]], TimerHandle]


class ReconnectBackoff:
    """Capped exponential backoff in integer milliseconds.

    ``next_delay`` hands out the current delay and doubles it for the next
    failure, never past ``max_delay_ms``. ``reset`` returns to the floor.
    """

    def __init__(
        self,
        min_delay_ms: int = RECONNECT_MIN_DELAY_MS,
        max_delay_ms: int = RECONNECT_MAX_DELAY_MS,
    ) -> None:
        if min_delay_ms <= 0:
            msg = "min_delay_ms must be positive"
            raise ValueError(msg)
        if max_delay_ms < min_delay_ms:
            msg = "max_delay_ms must be >= min_delay_ms"
            raise ValueError(msg)
        self.min_delay_ms = min_delay_ms
        self.max_delay_ms = max_delay_ms
        self._current = min_delay_ms

    @property
    def current(self) -> int:
        return self._current

    def next_delay(self) -> int:
        delay = self._current
        self._current = min(self._current * 2, self.max_delay_ms)
        return delay

    def reset(self) -> None:
        self._current = self.min_delay_ms


class ReconnectScheduler:
    """Single-shot reconnect timer.

    At most one timer is armed at a time; arming again replaces it. Timers
    come from *call_later* (``loop.call_later`` of the running loop when not
    given), which takes a delay in seconds.
    """

    def __init__(self, backoff: ReconnectBackoff, *, call_later: CallLater | None = None) -> None:
        self.backoff = backoff
        self._call_later = call_later
        self._handle: TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, callback: Callable[[], None]) -> int:
        """Arm the timer for the next backoff delay and return that delay in ms."""
        self.cancel()
        delay_ms = self.backoff.next_delay()
        call_later = self._call_later or asyncio.get_running_loop().call_later

        def _fire() -> None:
            self._handle = None
            callback()

        self._handle = call_later(delay_ms / 1000, _fire)
        logger.debug("Reconnect scheduled in %d ms", delay_ms)
        return delay_ms

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def reset(self) -> None:
        self.backoff.reset()


__all__ = ["CallLater", "ReconnectBackoff", "ReconnectScheduler", "TimerHandle"]
