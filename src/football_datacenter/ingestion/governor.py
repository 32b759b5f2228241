"""Process-wide throttle for outbound provider calls.

The provider allows a fixed number of calls per minute. Every ingestion or
notification call goes through one shared `RequestGovernor`:

    async with governor.slot():
        payload = await http.get_json(...)

`acquire()` blocks while a cooldown is running or while every slot of the
current window is already taken by in-flight calls. `release()` records the
call; when the count reaches `threshold` a single cooldown task starts, and all
waiters resume once it resets the count.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


@dataclass
class RequestGovernor:
    threshold: int = 9
    cooldown_seconds: float = 60.0
    progress_interval_s: float = 10.0

    call_count: int = field(default=0, init=False)
    throttling: bool = field(default=False, init=False)

    _sleep: SleepFn = field(default=asyncio.sleep, repr=False)

    def __post_init__(self) -> None:
        if self.threshold < 1:
            raise ValueError("threshold must be >= 1")
        if self.cooldown_seconds <= 0:
            raise ValueError("cooldown_seconds must be > 0")
        self._condition = asyncio.Condition()
        self._in_flight = 0
        self._cooldown_task: asyncio.Task[None] | None = None
        self.cooldowns_started = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    def _has_capacity(self) -> bool:
        return not self.throttling and self.call_count + self._in_flight < self.threshold

    async def acquire(self) -> None:
        """Wait until one provider call may be made, then reserve it."""

        async with self._condition:
            await self._condition.wait_for(self._has_capacity)
            self._in_flight += 1

    async def release(self) -> None:
        """Record one finished call (successful or not) against the quota."""

        async with self._condition:
            if self._in_flight > 0:
                self._in_flight -= 1
            self.call_count += 1
            if self.call_count >= self.threshold and not self.throttling:
                self.throttling = True
                self.cooldowns_started += 1
                logger.warning(
                    "Provider quota reached (%s calls), pausing for %ss",
                    self.call_count,
                    self.cooldown_seconds,
                )
                self._cooldown_task = asyncio.create_task(
                    self._cool_down(), name="request-governor-cooldown"
                )
            else:
                self._condition.notify_all()

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Acquire before the block and always release after it."""

        await self.acquire()
        try:
            yield
        finally:
            await self.release()

    async def wait_idle(self) -> None:
        """Wait for a running cooldown (if any) to finish."""

        task = self._cooldown_task
        if task is not None and not task.done():
            await asyncio.shield(task)

    async def _cool_down(self) -> None:
        remaining = self.cooldown_seconds
        try:
            while remaining > 0:
                logger.info("Waiting for provider quota: %ss left", math.ceil(remaining))
                step = min(self.progress_interval_s, remaining)
                await self._sleep(step)
                remaining -= step
        finally:
            async with self._condition:
                self.call_count = 0
                self.throttling = False
                self._condition.notify_all()
            logger.info("Provider quota window reset")
