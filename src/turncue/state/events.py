"""Normalized signal updates.

Every readiness check converts its outcome into one of these events.
Only the state/store layer is allowed to merge them.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from turncue.models.readiness import Signal


class SignalUpdate(BaseModel):
    """The outcome of one check for one signal."""

    model_config = ConfigDict(frozen=True)

    signal: Signal
    value: bool
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    reason: str | None = Field(
        default=None,
        description="Why the signal is false (service disabled, timeout, ...).",
    )

    @field_validator("observed_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
