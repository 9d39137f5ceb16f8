"""
catbreeds-sync: Offline-capable catalog of cat breeds from The Cat API.

This package keeps a local SQLite copy of The Cat API's breed catalog and
serves every read online first, falling back to the cache when the API is
unreachable. Favorites are a purely local flag that survives every refresh.

Architecture:
    Every listing or search runs the same pipeline:

    FETCH (api/): Ask The Cat API for a page, the full catalog or a search
        - A failure here falls back to the cache

    ENRICH (sync/): Resolve each breed's reference image
        - Lookups fan out over a bounded thread pool
        - A failed lookup only drops that breed's image

    MERGE (sync/): Keep local state
        - Each breed inherits its cached favorite flag
        - The whole batch is upserted in one transaction

    READ BACK (core/): Serve the requested window from the cache

Modules:
    core/       - Configuration, cache store, logging, errors, results
    api/        - The Cat API client and breed/image models
    sync/       - Sync engine, error policies, pagination math
    state/      - Immutable view states, state channel, view models
    cli.py      - Command-line interface

Usage:
    Command Line:
        catbreeds init
        catbreeds list --page 2
        catbreeds search siam
        catbreeds favorite abys

    Python API:
        from catbreeds.core import load_config, Database, setup_logging
        from catbreeds.api import CatApiClient
        from catbreeds.sync import CatalogSyncEngine

        config = load_config()
        setup_logging(config.logging.directory)
        engine = CatalogSyncEngine(
            CatApiClient(config.api),
            Database(config.cache.database),
            config.sync
        )

        engine.initialize_app_data()
        page = engine.get_breeds(page=0)

Configuration:
    Reads an optional config.yaml from the current directory:

        api:
          base_url: "https://api.thecatapi.com/v1/"
          timeout: 15
        cache:
          database: "~/.catbreeds/breeds.db"
        sync:
          page_size: 10
          assumed_total: 67
          max_image_workers: 8

    The API key is read from the CAT_API_KEY environment variable (or .env).

Dependencies:
    - requests: HTTP client for The Cat API
    - click / rich-click: CLI framework
    - rich: Tables and progress bars
    - tqdm: Log output that does not break progress bars
    - pyyaml: Configuration file parsing
    - python-dotenv: API key from .env
"""

__version__ = "0.3.0"
__author__ = "catbreeds-sync"
__license__ = "MIT"

# Convenience imports for common usage
from catbreeds.core import (
    CacheError,
    CatalogError,
    Config,
    ConfigError,
    Database,
    Failure,
    NotFoundError,
    Success,
    TransportError,
    get_logger,
    load_config,
    setup_logging,
)
from catbreeds.api import CatApiClient, CatBreed, CatImage
from catbreeds.sync import CatalogSyncEngine

__all__ = [
    # Version
    "__version__",
    # Core
    "Config",
    "load_config",
    "Database",
    "setup_logging",
    "get_logger",
    # Results
    "Success",
    "Failure",
    # Exceptions
    "CatalogError",
    "ConfigError",
    "TransportError",
    "NotFoundError",
    "CacheError",
    # Models
    "CatApiClient",
    "CatBreed",
    "CatImage",
    # Engine
    "CatalogSyncEngine",
]
