"""Observable readiness store.

This is the only component allowed to replace the readiness snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from turncue.models.readiness import ReadinessState, Signal
from turncue.state.events import SignalUpdate

_logger = logging.getLogger(__name__)

StateListener = Callable[[ReadinessState], None]


class ReadinessStore:
    """Holds the current :class:`ReadinessState` and notifies listeners.

    Snapshots are immutable; every accepted update swaps in a patched
    copy. Listeners only hear about snapshots that differ from the
    previous one.
    """

    def __init__(self, initial: ReadinessState | None = None) -> None:
        self._state = initial if initial is not None else ReadinessState()
        self._last_updates: dict[Signal, SignalUpdate] = {}
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> ReadinessState:
        return self._state

    def apply(self, update: SignalUpdate) -> ReadinessState:
        """Apply a signal update and return the resulting snapshot."""
        self._last_updates[update.signal] = update
        previous = self._state
        current = previous.with_signal(update.signal, update.value)
        if current is previous:
            return current

        self._state = current
        _logger.debug(
            "Signal %s -> %s%s",
            update.signal.value,
            update.value,
            f" ({update.reason})" if update.reason else "",
        )
        for listener in list(self._listeners):
            try:
                listener(current)
            except Exception:
                _logger.debug("Readiness listener failed", exc_info=True)
        return current

    def last_update(self, signal: Signal) -> SignalUpdate | None:
        """Most recent update applied for *signal*, changed or not."""
        return self._last_updates.get(signal)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register *listener* for snapshot changes.

        Returns a callable that removes the listener again; calling it
        more than once is harmless.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe
