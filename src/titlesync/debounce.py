"""A single restartable asyncio timer."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

logger = logging.getLogger(__name__)


class Debouncer:
    """Run a coroutine once, after ``timeout_ms`` of quiet.

    Each ``trigger`` cancels the pending call and schedules a new one with the
    latest arguments. A call that has already started is never cancelled.
    Calls never overlap: a call that fires while another is running waits
    for it to finish.
    """

    def __init__(self, timeout_ms: int) -> None:
        self.timeout_ms = timeout_ms
        self._pending: asyncio.Task | None = None
        self._running: set[asyncio.Task] = set()
        self._lock = asyncio.Lock()

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def trigger(self, func: Callable[..., Coroutine[Any, Any, Any]], *args: Any) -> None:
        self.cancel()
        self._pending = asyncio.create_task(self._fire_later(func, args))

    def cancel(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def _fire_later(self, func: Callable[..., Coroutine[Any, Any, Any]], args: tuple) -> None:
        await asyncio.sleep(self.timeout_ms / 1000)
        task = asyncio.current_task()
        # Detach so a trigger fired by our own work does not cancel us
        if self._pending is task:
            self._pending = None
        if task is not None:
            self._running.add(task)
        try:
            async with self._lock:
                await func(*args)
        except Exception:
            logger.exception("Debounced call %s failed", getattr(func, "__name__", func))
        finally:
            self._running.discard(task)

    async def flush(self) -> None:
        """Wait for the pending call (if any) and any call in progress."""
        while self._pending is not None or self._running:
            tasks = [t for t in (self._pending, *self._running) if t is not None]
            await asyncio.gather(*tasks, return_exceptions=True)
            if self._pending is not None and self._pending.done():
                self._pending = None
