"""
Configuration management for catbreeds.

This module handles loading, validating, and providing access to the
application configuration stored in config.yaml.

The configuration file contains:
    - Cat API endpoint, optional API key and request timeout
    - Location of the SQLite cache file
    - Sync settings (page size, assumed total breed count, image workers)
    - Log directory and console level

Configuration File Location:
    config.yaml is looked up in the current working directory unless an
    explicit path is given. Unlike credentials-driven tools, every field has
    a usable default, so a missing file yields Config.default().

API Key:
    The Cat API works without a key at a lower rate limit. A key can be set
    in config.yaml or via the CAT_API_KEY environment variable (a .env file
    in the working directory is honoured). The environment wins.

Example config.yaml:
    api:
      base_url: "https://api.thecatapi.com/v1/"
      api_key: null
      timeout: 15

    cache:
      database: "~/.catbreeds/breeds.db"

    sync:
      page_size: 10
      assumed_total: 67
      max_image_workers: 8

    logging:
      directory: "~/.catbreeds/logs"
      level: "INFO"
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from catbreeds.core.exceptions import ConfigError


CONFIG_FILENAME = "config.yaml"
API_KEY_ENV_VAR = "CAT_API_KEY"

DEFAULT_BASE_URL = "https://api.thecatapi.com/v1/"
DEFAULT_TIMEOUT = 15.0
DEFAULT_DATABASE = "~/.catbreeds/breeds.db"
DEFAULT_LOG_DIRECTORY = "~/.catbreeds/logs"
DEFAULT_PAGE_SIZE = 10
# The Cat API lists roughly this many breeds; only used before a real count is known
DEFAULT_ASSUMED_TOTAL = 67
DEFAULT_MAX_IMAGE_WORKERS = 8

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ApiConfig:
    """
    Remote Cat API settings.

    Attributes:
        base_url: API root, always ending with '/'.
        api_key: Optional key sent as the x-api-key header.
        timeout: Per-request timeout in seconds.
    """
    base_url: str
    api_key: str | None
    timeout: float


@dataclass(frozen=True)
class CacheConfig:
    """
    Local cache settings.

    Attributes:
        database: Absolute path of the SQLite file. The parent directory is
                  created by the CLI before the database is opened.
    """
    database: Path


@dataclass(frozen=True)
class SyncSettings:
    """
    Sync engine tuning passed to the engine at construction.

    Attributes:
        page_size: Breeds per page for paginated listing.
        assumed_total: Breed count used for page math before any real count
                       (network or cache) is available.
        max_image_workers: Upper bound on concurrent image lookups during
                           one enrichment pass.
    """
    page_size: int = DEFAULT_PAGE_SIZE
    assumed_total: int = DEFAULT_ASSUMED_TOTAL
    max_image_workers: int = DEFAULT_MAX_IMAGE_WORKERS


@dataclass(frozen=True)
class LoggingConfig:
    """
    Logging settings.

    Attributes:
        directory: Directory where per-run log files are written.
        level: Console log level name.
    """
    directory: Path
    level: str


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    Created by load_config() and treated as immutable (frozen dataclass).

    Example:
        config = load_config()
        print(f"Cache at: {config.cache.database}")
        print(f"Page size: {config.sync.page_size}")
    """
    api: ApiConfig
    cache: CacheConfig
    sync: SyncSettings
    logging: LoggingConfig

    @classmethod
    def default(cls) -> "Config":
        """Build a configuration using only defaults and the environment."""
        return _build_config({})


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration from config.yaml.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for config.yaml in current working directory.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If an explicit config_path does not exist, the file has
                     invalid YAML syntax, or contains invalid values.

    Behavior:
        1. Load .env from the working directory (does not override real env vars)
        2. Locate config file (explicit path or CWD/config.yaml)
        3. If the default file is absent, fall back to defaults
        4. Parse YAML and validate each section
        5. Create and return frozen Config object
    """
    load_dotenv()

    explicit = config_path is not None
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    if not config_path.exists():
        if explicit:
            raise ConfigError(
                f"Configuration file not found: {config_path}",
                details={"file_path": str(config_path)}
            )
        return Config.default()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    # An empty file is valid and means "all defaults"
    if raw_config is None:
        raw_config = {}

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )

    return _build_config(raw_config)


def _build_config(raw_config: dict[str, Any]) -> Config:
    for section in ("api", "cache", "sync", "logging"):
        value = raw_config.get(section)
        if value is not None and not isinstance(value, dict):
            raise ConfigError(
                f"Section '{section}' must be a dictionary",
                details={"section": section}
            )

    return Config(
        api=_parse_api_config(raw_config.get("api") or {}),
        cache=_parse_cache_config(raw_config.get("cache") or {}),
        sync=_parse_sync_settings(raw_config.get("sync") or {}),
        logging=_parse_logging_config(raw_config.get("logging") or {}),
    )


def _parse_api_config(section: dict[str, Any]) -> ApiConfig:
    base_url = section.get("base_url", DEFAULT_BASE_URL)
    if not isinstance(base_url, str) or not base_url.strip():
        raise ConfigError(
            "'api.base_url' must be a non-empty string",
            details={"field": "api.base_url"}
        )
    base_url = base_url.strip()
    if not base_url.endswith("/"):
        base_url += "/"

    api_key = section.get("api_key")
    if api_key is not None and not isinstance(api_key, str):
        raise ConfigError(
            "'api.api_key' must be a string or null",
            details={"field": "api.api_key"}
        )
    env_key = os.environ.get(API_KEY_ENV_VAR)
    if env_key:
        api_key = env_key
    if api_key is not None:
        api_key = api_key.strip() or None

    timeout = section.get("timeout", DEFAULT_TIMEOUT)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigError(
            "'api.timeout' must be a positive number",
            details={"field": "api.timeout", "value": timeout}
        )

    return ApiConfig(base_url=base_url, api_key=api_key, timeout=float(timeout))


def _parse_cache_config(section: dict[str, Any]) -> CacheConfig:
    database = section.get("database", DEFAULT_DATABASE)
    if not isinstance(database, str) or not database.strip():
        raise ConfigError(
            "'cache.database' must be a non-empty string",
            details={"field": "cache.database"}
        )
    return CacheConfig(database=Path(database.strip()).expanduser().resolve())


def _parse_sync_settings(section: dict[str, Any]) -> SyncSettings:
    values = {}
    for name, default in (
        ("page_size", DEFAULT_PAGE_SIZE),
        ("assumed_total", DEFAULT_ASSUMED_TOTAL),
        ("max_image_workers", DEFAULT_MAX_IMAGE_WORKERS),
    ):
        raw = section.get(name, default)
        minimum = 0 if name == "assumed_total" else 1
        if isinstance(raw, bool) or not isinstance(raw, int) or raw < minimum:
            qualifier = "non-negative" if minimum == 0 else "positive"
            raise ConfigError(
                f"'sync.{name}' must be a {qualifier} integer",
                details={"field": f"sync.{name}", "value": raw}
            )
        values[name] = raw
    return SyncSettings(**values)


def _parse_logging_config(section: dict[str, Any]) -> LoggingConfig:
    directory = section.get("directory", DEFAULT_LOG_DIRECTORY)
    if not isinstance(directory, str) or not directory.strip():
        raise ConfigError(
            "'logging.directory' must be a non-empty string",
            details={"field": "logging.directory"}
        )

    level = section.get("level", "INFO")
    if not isinstance(level, str) or level.upper() not in _LOG_LEVELS:
        raise ConfigError(
            f"'logging.level' must be one of {', '.join(_LOG_LEVELS)}",
            details={"field": "logging.level", "value": level}
        )

    return LoggingConfig(
        directory=Path(directory.strip()).expanduser().resolve(),
        level=level.upper(),
    )
