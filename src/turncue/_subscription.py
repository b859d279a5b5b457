"""Internal handle for the continuous location subscription."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Mapping
from typing import Any

from turncue.models.platform import Position

_logger = logging.getLogger(__name__)


class LocationSubscription:
    """Drains a position stream on a background task.

    Position updates are only recorded; they never feed back into the
    readiness state. The handle is inactive once cancelled or once the
    stream ends, and the aggregator then opens a new one on the next
    successful location check.
    """

    def __init__(self, stream: AsyncIterator[Position | Mapping[str, Any]]) -> None:
        self._stream = stream
        self._cancelled = False
        self.updates = 0
        self.last_position: Position | None = None
        self._task: asyncio.Task[None] = asyncio.get_running_loop().create_task(
            self._consume(), name="turncue-location-subscription"
        )

    @property
    def active(self) -> bool:
        return not self._cancelled and not self._task.done()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Cancel the subscription. Safe to call repeatedly."""
        if self._cancelled:
            return
        self._cancelled = True
        if not self._task.done():
            self._task.cancel()
        _logger.info("Location subscription cancelled")

    async def wait_closed(self) -> None:
        with contextlib.suppress(asyncio.CancelledError):
            await self._task

    async def _consume(self) -> None:
        try:
            async for item in self._stream:
                position = item if isinstance(item, Position) else Position.model_validate(item)
                self.updates += 1
                self.last_position = position
        except asyncio.CancelledError:
            raise
        except Exception:
            _logger.debug("Location stream failed", exc_info=True)
        else:
            _logger.debug("Location stream ended after %d updates", self.updates)
        finally:
            aclose = getattr(self._stream, "aclose", None)
            if aclose is not None:
                with contextlib.suppress(Exception):
                    await aclose()
