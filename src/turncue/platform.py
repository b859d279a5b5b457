"""Platform capability providers consumed by the aggregator.

The host application supplies concrete implementations (mobile plugin
bindings, desktop adapters, test fakes). Answers may be the typed
values from :mod:`turncue.models.platform` or their raw equivalents
(strings, dicts); the aggregator coerces them.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from turncue.models.platform import BondedDevice, ConnectivityResult, LocationPermission, Position


class ConnectivityProvider(Protocol):
    async def check_connectivity(self) -> ConnectivityResult | str: ...


class LocationProvider(Protocol):
    async def is_location_service_enabled(self) -> bool: ...

    async def check_permission(self) -> LocationPermission | str: ...

    async def request_permission(self) -> LocationPermission | str: ...

    def position_stream(self) -> AsyncIterator[Position | Mapping[str, Any]]:
        """Return a fresh stream of position updates.

        The stream is consumed until the subscription is cancelled or
        the iterator is exhausted.
        """
        ...


class BluetoothProvider(Protocol):
    async def is_enabled(self) -> bool | None: ...

    async def get_bonded_devices(self) -> Sequence[BondedDevice | Mapping[str, Any]]: ...


@dataclass(frozen=True)
class PlatformServices:
    """The three providers one aggregator polls."""

    connectivity: ConnectivityProvider
    location: LocationProvider
    bluetooth: BluetoothProvider
