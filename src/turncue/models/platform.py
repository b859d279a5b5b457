"""Value types returned by the platform capability providers.

Platform bindings answer in whatever shape their plugin uses: enum
members, camelCase strings (``"deniedForever"``), or plain dicts for
devices and positions. Everything is coerced here so the aggregator
only ever compares typed values.

Enums resolve unknown values to a catch-all member through a
``_missing_`` hook instead of raising ``ValueError``.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from enum import StrEnum
from typing import Annotated, Any

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 1_000_000_000_000


def _normalize_member_value(value: object) -> str | None:
    """``"deniedForever"`` / ``"DENIED-FOREVER"`` -> ``"denied_forever"``."""
    if not isinstance(value, str):
        return None
    text = value.strip()
    if "." in text:
        # Enum reprs such as "LocationPermission.deniedForever".
        text = text.rsplit(".", 1)[1]
    text = _CAMEL_BOUNDARY.sub("_", text)
    return text.replace("-", "_").replace(" ", "_").lower()


class ConnectivityResult(StrEnum):
    """Network reachability reported by the platform."""

    NONE = "none"
    WIFI = "wifi"
    MOBILE = "mobile"
    ETHERNET = "ethernet"
    OTHER = "other"

    @classmethod
    def _missing_(cls, value: object) -> ConnectivityResult:
        if value is None:
            return cls.NONE
        normalized = _normalize_member_value(value)
        for member in cls:
            if member.value == normalized:
                return member
        # vpn, bluetooth tethering, ...: some connection, type unknown.
        return cls.OTHER

    @property
    def is_connected(self) -> bool:
        return self is not ConnectivityResult.NONE


class LocationPermission(StrEnum):
    """Location permission state."""

    DENIED = "denied"
    DENIED_FOREVER = "denied_forever"
    WHILE_IN_USE = "while_in_use"
    ALWAYS = "always"
    UNABLE_TO_DETERMINE = "unable_to_determine"

    @classmethod
    def _missing_(cls, value: object) -> LocationPermission:
        normalized = _normalize_member_value(value)
        if normalized == "granted":
            return cls.WHILE_IN_USE
        for member in cls:
            if member.value == normalized:
                return member
        return cls.UNABLE_TO_DETERMINE

    @property
    def is_granted(self) -> bool:
        return self in (LocationPermission.WHILE_IN_USE, LocationPermission.ALWAYS)


def parse_platform_timestamp(value: Any) -> datetime | None:
    """Convert an epoch timestamp (seconds **or** milliseconds) to a UTC datetime."""
    if value is None or isinstance(value, datetime):
        return value
    ts = float(value)
    if ts >= _MS_THRESHOLD:
        ts /= 1000.0
    return datetime.fromtimestamp(ts, tz=UTC)


PlatformTimestamp = Annotated[datetime | None, BeforeValidator(parse_platform_timestamp)]


class BondedDevice(BaseModel):
    """A peripheral bonded (paired) with the host's Bluetooth adapter.

    Parameters
    ----------
    name : str or None
        Advertised device name. Some stacks report bonded devices
        without a name.
    address : str
        Hardware address.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    name: str | None = Field(default=None, validation_alias=AliasChoices("name", "deviceName", "device_name"))
    address: str = Field(default="", validation_alias=AliasChoices("address", "macAddress", "mac_address", "mac"))


class Position(BaseModel):
    """A single update from the location stream."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    latitude: float | None = Field(default=None, validation_alias=AliasChoices("latitude", "lat"))
    longitude: float | None = Field(default=None, validation_alias=AliasChoices("longitude", "lng", "lon"))
    accuracy: float | None = None
    speed: float | None = None
    timestamp: PlatformTimestamp = Field(default=None, validation_alias=AliasChoices("timestamp", "time"))
