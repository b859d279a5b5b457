"""Custom exception hierarchy for turncue."""

from __future__ import annotations


class TurnCueError(Exception):
    """Base exception for all turncue errors."""


class TurnCueConfigError(TurnCueError):
    """Invalid or missing configuration."""


class AggregatorStateError(TurnCueError):
    """Aggregator lifecycle misuse (double start, start after stop)."""


class PlatformQueryFailure(TurnCueError):
    """A platform capability query raised or did not answer in time.

    Recovered inside the aggregator: the signal the query feeds is
    reported as ``False`` for that tick and the remaining checks run.
    """

    def __init__(
        self,
        message: str,
        *,
        capability: str = "",
        timed_out: bool = False,
    ) -> None:
        self.capability = capability
        self.timed_out = timed_out
        super().__init__(message)


class PermissionPermanentlyDenied(TurnCueError):
    """Location permission is ``denied_forever``.

    The user has to change it in the system settings; the aggregator
    keeps the location signal ``False`` and never prompts again.
    """
