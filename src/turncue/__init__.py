"""turncue - Async readiness aggregator for the TurnCue vest companion app."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("turncue")
except PackageNotFoundError:
    __version__ = "0+local"
from turncue.aggregator import ReadinessAggregator
from turncue.config import DEFAULT_PERIPHERAL_NAME, ReadinessConfig
from turncue.connectivity import HttpConnectivityProbe
from turncue.exceptions import (
    AggregatorStateError,
    PermissionPermanentlyDenied,
    PlatformQueryFailure,
    TurnCueConfigError,
    TurnCueError,
)
from turncue.models import (
    BondedDevice,
    ConnectivityResult,
    LocationPermission,
    Position,
    ReadinessState,
    Signal,
)
from turncue.platform import BluetoothProvider, ConnectivityProvider, LocationProvider, PlatformServices
from turncue.state.events import SignalUpdate
from turncue.state.store import ReadinessStore

__all__ = [
    "__version__",
    "AggregatorStateError",
    "BluetoothProvider",
    "BondedDevice",
    "ConnectivityProvider",
    "ConnectivityResult",
    "DEFAULT_PERIPHERAL_NAME",
    "HttpConnectivityProbe",
    "LocationPermission",
    "LocationProvider",
    "PermissionPermanentlyDenied",
    "PlatformQueryFailure",
    "PlatformServices",
    "Position",
    "ReadinessAggregator",
    "ReadinessConfig",
    "ReadinessState",
    "ReadinessStore",
    "Signal",
    "SignalUpdate",
    "TurnCueConfigError",
    "TurnCueError",
]
