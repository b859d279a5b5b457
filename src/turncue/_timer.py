"""Internal repeating timer on top of an asyncio task."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

from turncue.exceptions import AggregatorStateError

_logger = logging.getLogger(__name__)


class PeriodicTimer:
    """Await *callback* every *interval* seconds until cancelled.

    The callback is awaited before the next sleep starts, so two runs
    never overlap. ``cancel()`` may be called from inside the callback;
    the loop then exits after the callback returns instead of being
    interrupted mid-await.
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[], Awaitable[None]],
        *,
        name: str | None = None,
    ) -> None:
        self._interval = interval
        self._callback = callback
        self._name = name
        self._task: asyncio.Task[None] | None = None
        self._cancelled = False
        self._runs = 0

    @property
    def is_active(self) -> bool:
        return self._task is not None and not self._task.done() and not self._cancelled

    @property
    def runs(self) -> int:
        """Number of callback invocations so far."""
        return self._runs

    def start(self) -> None:
        if self._task is not None or self._cancelled:
            raise AggregatorStateError("Timer already started or cancelled")
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self._name)

    def cancel(self) -> None:
        """Stop the timer. Safe to call repeatedly."""
        self._cancelled = True
        task = self._task
        if task is None or task.done():
            return
        if task is asyncio.current_task():
            return
        task.cancel()

    async def wait_closed(self) -> None:
        """Wait until the timer task has finished after ``cancel()``."""
        task = self._task
        if task is None or task is asyncio.current_task():
            return
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(self) -> None:
        while not self._cancelled:
            await asyncio.sleep(self._interval)
            if self._cancelled:
                break
            self._runs += 1
            try:
                await self._callback()
            except Exception:
                _logger.exception("Periodic callback failed")
