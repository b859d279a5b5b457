"""Typed models for readiness state and platform answers."""

from turncue.models.platform import (
    BondedDevice,
    ConnectivityResult,
    LocationPermission,
    PlatformTimestamp,
    Position,
    parse_platform_timestamp,
)
from turncue.models.readiness import ReadinessState, Signal

__all__ = [
    "BondedDevice",
    "ConnectivityResult",
    "LocationPermission",
    "PlatformTimestamp",
    "Position",
    "ReadinessState",
    "Signal",
    "parse_platform_timestamp",
]
