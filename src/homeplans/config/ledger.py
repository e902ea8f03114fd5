"""Price ledger defaults."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .env import optional_float_env
from .errors import ConfigurationError

DEFAULT_PRICE_CHANGE_WINDOW_HOURS = 24.0
PRICE_CHANGE_WINDOW_ENV = "HOMEPLANS_PRICE_CHANGE_WINDOW_HOURS"


@dataclass(frozen=True, slots=True)
class LedgerConfig:
    price_change_window: timedelta = timedelta(hours=DEFAULT_PRICE_CHANGE_WINDOW_HOURS)


def get_ledger_config() -> LedgerConfig:
    hours = optional_float_env(PRICE_CHANGE_WINDOW_ENV, DEFAULT_PRICE_CHANGE_WINDOW_HOURS)
    if hours < 0:
        raise ConfigurationError(f"{PRICE_CHANGE_WINDOW_ENV} must be non-negative")
    return LedgerConfig(price_change_window=timedelta(hours=hours))
