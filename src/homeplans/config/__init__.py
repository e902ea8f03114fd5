"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_float_env
from .errors import ConfigurationError
from .ledger import (
    DEFAULT_PRICE_CHANGE_WINDOW_HOURS,
    PRICE_CHANGE_WINDOW_ENV,
    LedgerConfig,
    get_ledger_config,
)
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "DEFAULT_PRICE_CHANGE_WINDOW_HOURS",
    "PRICE_CHANGE_WINDOW_ENV",
    "ConfigurationError",
    "DatabaseConfig",
    "LedgerConfig",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_ledger_config",
    "get_storage_config",
    "optional_float_env",
]
