"""
Core module for catbreeds.

This module provides the foundational components used throughout the application:
    - exceptions: Error hierarchy with a classified kind per error
    - result: Success/Failure values returned by the sync engine
    - config: Configuration loading and validation
    - database: Thread-safe SQLite cache of breeds
    - logger: Logging system with multiple outputs
    - progress: Rich progress bar for image enrichment

Usage:
    from catbreeds.core import (
        Config, load_config,
        Database,
        setup_logging, get_logger,
        CatalogError, ConfigError, CacheError
    )
"""

from catbreeds.core.config import (
    ApiConfig,
    CacheConfig,
    Config,
    LoggingConfig,
    SyncSettings,
    load_config,
)
from catbreeds.core.database import Database, DATABASE_VERSION
from catbreeds.core.exceptions import (
    CacheError,
    CatalogError,
    ConfigError,
    ErrorKind,
    NotFoundError,
    TransportError,
)
from catbreeds.core.logger import (
    get_logger,
    log_sync_failure,
    setup_logging,
    shutdown_logging,
)
from catbreeds.core.result import Failure, Result, Success

__all__ = [
    # Config
    "Config",
    "ApiConfig",
    "CacheConfig",
    "SyncSettings",
    "LoggingConfig",
    "load_config",
    # Database
    "Database",
    "DATABASE_VERSION",
    # Exceptions
    "CatalogError",
    "ConfigError",
    "TransportError",
    "NotFoundError",
    "CacheError",
    "ErrorKind",
    # Results
    "Success",
    "Failure",
    "Result",
    # Logging
    "setup_logging",
    "get_logger",
    "log_sync_failure",
    "shutdown_logging",
]
