"""Application configuration helpers."""

from __future__ import annotations

from .env import env_int, require_env_vars
from .errors import (
    ConfigurationError,
    InvalidConfigurationValueError,
    MissingConfigurationError,
)
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .klaviyo import KlaviyoConfig, get_klaviyo_config
from .logging import configure_logging
from .reamaze import ReamazeConfig, get_reamaze_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .sync import SyncConfig, get_sync_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "InvalidConfigurationValueError",
    "KlaviyoConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ReamazeConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "SyncConfig",
    "configure_logging",
    "env_int",
    "get_database_config",
    "get_klaviyo_config",
    "get_reamaze_config",
    "get_storage_config",
    "get_sync_config",
    "require_env_vars",
]
