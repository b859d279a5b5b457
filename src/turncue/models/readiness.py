"""Readiness snapshot model."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class Signal(StrEnum):
    """The four readiness signals, in tick order."""

    NETWORK = "network"
    LOCATION = "location"
    BLUETOOTH_ADAPTER = "bluetooth_adapter"
    PERIPHERAL_PAIRED = "peripheral_paired"


_STATUS_TITLES: dict[Signal, str] = {
    Signal.NETWORK: "Data service status",
    Signal.LOCATION: "Location service status",
    Signal.BLUETOOTH_ADAPTER: "Bluetooth service status",
    Signal.PERIPHERAL_PAIRED: "turnCue vest pairing status",
}


class ReadinessState(BaseModel):
    """Immutable view of the four readiness signals.

    Parameters
    ----------
    network : bool
        Some network connection is available.
    location : bool
        Location service is enabled and permission is granted.
    bluetooth_adapter : bool
        The Bluetooth adapter is powered on.
    peripheral_paired : bool
        The TurnCue vest is among the bonded devices.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    network: bool = False
    location: bool = False
    bluetooth_adapter: bool = False
    peripheral_paired: bool = False

    @property
    def is_ready(self) -> bool:
        """Whether all four signals are simultaneously true."""
        return self.network and self.location and self.bluetooth_adapter and self.peripheral_paired

    def get(self, signal: Signal) -> bool:
        return bool(getattr(self, signal.value))

    def with_signal(self, signal: Signal, value: bool) -> ReadinessState:
        """Return a copy with *signal* set to *value*."""
        if self.get(signal) == value:
            return self
        return self.model_copy(update={signal.value: value})

    def status_lines(self) -> list[tuple[str, bool]]:
        """``(title, flag)`` pairs in display order."""
        return [(_STATUS_TITLES[signal], self.get(signal)) for signal in Signal]
