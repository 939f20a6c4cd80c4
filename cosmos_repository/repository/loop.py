"""
Dedicated event loop for blocking repositories.

Blocking repositories run the same coroutines as the async ones. They submit
them to an event loop living on a background thread and wait for the result,
so the async Cosmos client always runs on one loop.
"""

from __future__ import annotations

import asyncio
import functools
import threading
from collections.abc import AsyncIterator, Coroutine
from typing import Any, TypeVar

R = TypeVar("R")


async def _collect(items: AsyncIterator[R]) -> list[R]:
    return [item async for item in items]


class EventLoopThread:
    """An asyncio event loop running forever on a daemon thread."""

    def __init__(self, name: str = "cosmos-repository-loop"):
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run_loop, name=name, daemon=True)
        self._closed = False
        self._thread.start()

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def run(self, coro: Coroutine[Any, Any, R]) -> R:
        """Run a coroutine on the loop thread and block until it finishes."""
        if self._closed:
            coro.close()
            raise RuntimeError("event loop thread is closed")
        if threading.current_thread() is self._thread:
            coro.close()
            raise RuntimeError("blocking call made from the repository event loop thread")
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result()

    def collect(self, items: AsyncIterator[R]) -> list[R]:
        """Drain an async iterator on the loop thread into a list."""
        return self.run(_collect(items))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join()
        self._loop.close()

    def __enter__(self) -> EventLoopThread:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


@functools.lru_cache(maxsize=None)
def get_default_loop_thread() -> EventLoopThread:
    """Process-wide loop thread shared by blocking repositories."""
    return EventLoopThread()
