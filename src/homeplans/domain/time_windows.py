"""Trailing time windows anchored on an injectable clock."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    def __call__(self) -> datetime: ...


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Normalise an aware datetime to UTC; naive values are rejected."""

    if value.tzinfo is None:
        raise ValueError("Window anchors must include timezone information")
    return value.astimezone(UTC)


@dataclass(frozen=True, slots=True)
class TrailingWindow:
    """The closed interval ``[anchor - lookback, anchor]``.

    The anchor defaults to the clock's "now" at resolution time, so one window can be
    resolved repeatedly as time moves on.
    """

    lookback: timedelta

    def __post_init__(self) -> None:
        if self.lookback < timedelta(0):
            raise ValueError("Lookback duration must be non-negative")

    def bounds(
        self,
        *,
        clock: Clock = utcnow,
        anchor: datetime | None = None,
    ) -> tuple[datetime, datetime]:
        end = as_utc(anchor if anchor is not None else clock())
        return end - self.lookback, end

    def start(self, *, clock: Clock = utcnow) -> datetime:
        return self.bounds(clock=clock)[0]


__all__ = ["Clock", "TrailingWindow", "as_utc", "utcnow"]
