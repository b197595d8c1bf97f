"""Cancellable repeating task used for the ledger tick and board polling."""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

TickCallback = Callable[[], Awaitable[None] | None]


class RepeatingTask:
    """Runs `callback` every `interval` seconds until stopped.

    Stopping is a single explicit call; the loop waits on an event rather than
    sleeping, so `stop()` returns without waiting out the current interval.
    """

    def __init__(self, interval: float, callback: TickCallback, name: str = "repeating-task") -> None:
        self.interval = max(0.01, float(interval))
        self.name = name
        self._callback = callback
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the loop if it is not already running."""
        if self.running:
            return
        self._stopping.clear()
        self._task = asyncio.create_task(self._run(), name=self.name)

    async def stop(self) -> None:
        """Stop the loop and wait for it to finish."""
        if self._task is None:
            return

        self._stopping.set()
        task, self._task = self._task, None
        if task is asyncio.current_task():
            return
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(self) -> None:
        while not self._stopping.is_set():
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval)
            if self._stopping.is_set():
                break
            try:
                result = self._callback()
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.error("%s callback failed", self.name, exc_info=True)
