"""Process-wide cooldown gate for outbound inference calls."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

from app.core.metrics import inference_throttle_wait_seconds

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


class Throttler:
    """
    Space consecutive outbound calls by at least `cooldown_seconds`.

    One instance is shared by every request in the process. Callers queue on an
    asyncio lock, so concurrent requests pass the gate one at a time in FIFO order.
    The timestamp is taken when a caller leaves the gate, i.e. at call start.
    """

    def __init__(
        self,
        *,
        cooldown_seconds: float = 1.0,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ):
        self._cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._sleep = sleep
        self._last_call: float | None = None
        self._lock = asyncio.Lock()

    @property
    def cooldown_seconds(self) -> float:
        return self._cooldown_seconds

    @property
    def last_call(self) -> float | None:
        return self._last_call

    async def wait_turn(self) -> float:
        """Block until the cooldown has passed, record the call start, return seconds waited."""

        async with self._lock:
            waited = 0.0
            if self._last_call is not None:
                elapsed = self._clock() - self._last_call
                if elapsed < self._cooldown_seconds:
                    waited = self._cooldown_seconds - elapsed
                    await self._sleep(waited)
            self._last_call = self._clock()

        inference_throttle_wait_seconds.observe(waited)
        return waited
