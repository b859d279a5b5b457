"""Aggregator configuration for turncue."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from turncue.exceptions import TurnCueConfigError

#: Literal bonded-device name of the TurnCue vest.
DEFAULT_PERIPHERAL_NAME = "TURN_CUE"


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise TurnCueConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class ReadinessConfig:
    """Readiness aggregator configuration.

    Parameters
    ----------
    poll_interval : float
        Seconds between two ticks of the polling timer.
    ready_delay : float
        Grace delay in seconds between the gate opening and the
        ``on_ready`` callback, so the "all green" state stays visible.
    check_timeout : float
        Upper bound in seconds for a single platform query. A query
        that does not answer in time reports its signal as ``False``.
    permission_timeout : float
        Upper bound in seconds for the location permission prompt.
    peripheral_name : str
        Bonded device name that marks the vest as paired. Compared
        exactly (case-sensitive).
    cancel_subscription_on_location_loss : bool
        Cancel the location subscription when a later check finds the
        location service disabled or permission revoked. ``False``
        keeps the subscription open like the legacy screen did.
    connectivity_url : str
        URL probed by :class:`~turncue.connectivity.HttpConnectivityProbe`.
    connectivity_timeout : float
        Total request timeout in seconds for the HTTP probe.
    """

    poll_interval: float = 2.0
    ready_delay: float = 2.0
    check_timeout: float = 5.0
    permission_timeout: float = 60.0
    peripheral_name: str = DEFAULT_PERIPHERAL_NAME
    cancel_subscription_on_location_loss: bool = True
    connectivity_url: str = "https://clients3.google.com/generate_204"
    connectivity_timeout: float = 3.0

    def __post_init__(self) -> None:
        if self.poll_interval <= 0:
            raise TurnCueConfigError("poll_interval must be positive")
        if self.ready_delay < 0:
            raise TurnCueConfigError("ready_delay must not be negative")
        for name in ("check_timeout", "permission_timeout", "connectivity_timeout"):
            if getattr(self, name) <= 0:
                raise TurnCueConfigError(f"{name} must be positive")
        if not self.peripheral_name:
            raise TurnCueConfigError("peripheral_name must be non-empty")

    @classmethod
    def from_env(cls, **overrides: Any) -> ReadinessConfig:
        """Create configuration from environment variables.

        Reads optional ``TURNCUE_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        ReadinessConfig
            Populated configuration.

        Raises
        ------
        TurnCueConfigError
            When a numeric variable cannot be parsed or a value is out
            of range.
        """
        env = os.environ

        _ENV_FLOAT_MAP = {
            "TURNCUE_POLL_INTERVAL": "poll_interval",
            "TURNCUE_READY_DELAY": "ready_delay",
            "TURNCUE_CHECK_TIMEOUT": "check_timeout",
            "TURNCUE_PERMISSION_TIMEOUT": "permission_timeout",
            "TURNCUE_CONNECTIVITY_TIMEOUT": "connectivity_timeout",
        }
        _ENV_STR_MAP = {
            "TURNCUE_PERIPHERAL_NAME": "peripheral_name",
            "TURNCUE_CONNECTIVITY_URL": "connectivity_url",
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        if "cancel_subscription_on_location_loss" not in overrides:
            config_kwargs["cancel_subscription_on_location_loss"] = _env_bool(
                env.get("TURNCUE_CANCEL_SUBSCRIPTION_ON_LOCATION_LOSS"),
                True,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
