"""Cooperative cancellation for tool calls.

A CancelToken is handed down through every await point of a tool call.
Firing it makes the next checkpoint raise asyncio.CancelledError, so the
call neither returns a result nor reports an ordinary error.

``cancel()`` may be called from any thread. The sync tool-call path runs
its event loop inside the caller's thread, so cancels arrive from outside.
"""

from __future__ import annotations

import asyncio
import inspect
import threading
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


class CancelToken:
    """One-shot cancellation signal shared between caller and pipeline."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._fired = False
        self._lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._fired

    def cancel(self, reason: str | None = None) -> None:
        with self._lock:
            if self._fired:
                return
            self.reason = reason or "Operation aborted"
            self._fired = True
            loop = self._loop

        if loop is None or _running_loop() is loop:
            self._event.set()
            return
        try:
            loop.call_soon_threadsafe(self._event.set)
        except RuntimeError:
            # loop already closed; the flag alone stops later checkpoints
            pass

    def raise_if_cancelled(self) -> None:
        if self._fired:
            raise asyncio.CancelledError(self.reason)

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token fires first.

        The pending step is cancelled when the token wins the race.
        """
        with self._lock:
            self._loop = asyncio.get_running_loop()
            fired = self._fired
        if fired:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise asyncio.CancelledError(self.reason)

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()
        if self._fired:
            if task.done() and not task.cancelled():
                # mark the outcome retrieved; cancellation wins
                task.exception()
            raise asyncio.CancelledError(self.reason)
        return task.result()


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


async def checkpoint(token: CancelToken | None, awaitable: Awaitable[T]) -> T:
    """Await through ``token`` when one is given."""
    if token is None:
        return await awaitable
    return await token.guard(awaitable)
