from __future__ import annotations

import pytest

from turncue.config import DEFAULT_PERIPHERAL_NAME, ReadinessConfig
from turncue.exceptions import TurnCueConfigError

_ENV_KEYS = (
    "TURNCUE_POLL_INTERVAL",
    "TURNCUE_READY_DELAY",
    "TURNCUE_CHECK_TIMEOUT",
    "TURNCUE_PERMISSION_TIMEOUT",
    "TURNCUE_CONNECTIVITY_TIMEOUT",
    "TURNCUE_PERIPHERAL_NAME",
    "TURNCUE_CONNECTIVITY_URL",
    "TURNCUE_CANCEL_SUBSCRIPTION_ON_LOCATION_LOSS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_match_legacy_screen() -> None:
    config = ReadinessConfig.from_env()

    assert config.poll_interval == 2.0
    assert config.ready_delay == 2.0
    assert config.peripheral_name == DEFAULT_PERIPHERAL_NAME == "TURN_CUE"
    assert config.cancel_subscription_on_location_loss is True


def test_env_values_are_parsed(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TURNCUE_POLL_INTERVAL", "0.5")
    monkeypatch.setenv("TURNCUE_CHECK_TIMEOUT", "1.5")
    monkeypatch.setenv("TURNCUE_PERIPHERAL_NAME", "TURN_CUE_DEV")
    monkeypatch.setenv("TURNCUE_CONNECTIVITY_URL", "http://localhost:8080/ping")
    monkeypatch.setenv("TURNCUE_CANCEL_SUBSCRIPTION_ON_LOCATION_LOSS", "off")

    config = ReadinessConfig.from_env()

    assert config.poll_interval == 0.5
    assert config.check_timeout == 1.5
    assert config.peripheral_name == "TURN_CUE_DEV"
    assert config.connectivity_url == "http://localhost:8080/ping"
    assert config.cancel_subscription_on_location_loss is False


def test_overrides_beat_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TURNCUE_POLL_INTERVAL", "0.5")
    monkeypatch.setenv("TURNCUE_CANCEL_SUBSCRIPTION_ON_LOCATION_LOSS", "no")

    config = ReadinessConfig.from_env(poll_interval=3.0, cancel_subscription_on_location_loss=True)

    assert config.poll_interval == 3.0
    assert config.cancel_subscription_on_location_loss is True


def test_unparseable_bool_falls_back_to_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TURNCUE_CANCEL_SUBSCRIPTION_ON_LOCATION_LOSS", "maybe")
    assert ReadinessConfig.from_env().cancel_subscription_on_location_loss is True


def test_unparseable_number_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TURNCUE_READY_DELAY", "soon")
    with pytest.raises(TurnCueConfigError, match="TURNCUE_READY_DELAY"):
        ReadinessConfig.from_env()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"poll_interval": 0},
        {"ready_delay": -1},
        {"check_timeout": 0},
        {"permission_timeout": -5},
        {"peripheral_name": ""},
    ],
)
def test_invalid_values_are_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(TurnCueConfigError):
        ReadinessConfig(**kwargs)  # type: ignore[arg-type]
