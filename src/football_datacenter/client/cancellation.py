"""Cooperative cancellation for polling attempts.

A `CancelToken` is owned by one attempt. `cancel()` wakes any pending
`sleep()` immediately and makes `guard()` drop an in-flight awaitable, so a
superseded attempt neither waits out its delay nor delivers its response.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

T = TypeVar("T")


class CancelToken:
    def __init__(self) -> None:
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def add_callback(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run `callback` on cancellation (immediately if already cancelled).

        Returns a function that unregisters it.
        """
        if self._cancelled:
            callback()
            return lambda: None

        self._callbacks.append(callback)

        def unregister() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unregister

    async def sleep(self, seconds: float) -> bool:
        """Wait `seconds`. Returns True if woken early by cancellation."""

        if self._cancelled:
            return True

        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[bool] = loop.create_future()

        def resolve(cancelled: bool) -> None:
            if not waiter.done():
                waiter.set_result(cancelled)

        handle = loop.call_later(max(seconds, 0.0), resolve, False)
        unregister = self.add_callback(lambda: resolve(True))
        try:
            return await waiter
        finally:
            handle.cancel()
            unregister()

    async def guard(self, awaitable: Awaitable[T]) -> tuple[bool, T | None]:
        """Await `awaitable` unless cancelled first.

        Returns (True, result) on completion and (False, None) when the token
        was cancelled; in that case the underlying task is cancelled too.
        """
        task: asyncio.Future[Any] = asyncio.ensure_future(awaitable)
        if self._cancelled:
            task.cancel()
            return False, None

        unregister = self.add_callback(task.cancel)
        try:
            result = await task
        except asyncio.CancelledError:
            if self._cancelled and not _current_task_cancelling():
                return False, None
            raise
        finally:
            unregister()

        if self._cancelled:
            return False, None
        return True, result


def _current_task_cancelling() -> bool:
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0
