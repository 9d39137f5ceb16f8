"""
The Cat API client for catbreeds.

This module wraps the four read-only endpoints the catalog needs behind a
small synchronous client built on a requests.Session. Every failure mode
(connection error, timeout, non-2xx status, undecodable body) is raised as
TransportError so callers deal with a single exception type.

Endpoints:
    GET breeds?limit=&page=     One page of breeds
    GET breeds                  The full catalog
    GET images/{image_id}       A breed's reference image
    GET breeds/search?q=        Breeds whose name matches the query

Authentication:
    The API works anonymously at a lower rate limit. When an API key is
    configured it is sent as the x-api-key header.

Usage:
    client = CatApiClient(config.api)
    breeds = client.list_page(limit=10, page=0)
    image = client.get_image(breeds[0].reference_image_id)

The sync engine depends only on the RemoteCatalog protocol, so tests can
pass any object with these four methods.
"""

import threading
from typing import Any, Protocol
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter

from catbreeds.api.models import CatBreed, CatImage
from catbreeds.core.config import ApiConfig
from catbreeds.core.exceptions import TransportError
from catbreeds.core.logger import get_logger

logger = get_logger(__name__)


USER_AGENT = "catbreeds-sync/0.3.0"
# Connection pool sized for the enrichment fan-out
POOL_SIZE = 16


class RemoteCatalog(Protocol):
    """Remote breed source consumed by the sync engine."""

    def list_page(self, limit: int, page: int) -> list[CatBreed]: ...

    def list_all(self) -> list[CatBreed]: ...

    def get_image(self, image_id: str) -> CatImage: ...

    def search(self, query: str) -> list[CatBreed]: ...


class CatApiClient:
    """
    Synchronous client for The Cat API.

    Attributes:
        base_url: API root ending in '/'.
        timeout: Per-request timeout in seconds.

    Thread Safety:
        The underlying requests.Session is shared by the enrichment worker
        threads. Sessions are safe for concurrent GETs with a sized
        connection pool; session creation and close() are guarded by a lock.
    """

    def __init__(self, config: ApiConfig, session: requests.Session | None = None) -> None:
        self.base_url = config.base_url
        self.timeout = config.timeout
        self._lock = threading.Lock()
        self._session = session or self._build_session(config.api_key)

    @staticmethod
    def _build_session(api_key: str | None) -> requests.Session:
        session = requests.Session()
        adapter = HTTPAdapter(
            pool_connections=POOL_SIZE, pool_maxsize=POOL_SIZE
        )
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        session.headers.update({
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        })
        if api_key:
            session.headers["x-api-key"] = api_key
        return session

    def close(self) -> None:
        with self._lock:
            self._session.close()

    def __enter__(self) -> "CatApiClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # =========================================================================
    # Endpoints
    # =========================================================================

    def list_page(self, limit: int, page: int) -> list[CatBreed]:
        """
        Get one page of breeds.

        Args:
            limit: Page size.
            page: Zero-based page index.

        Raises:
            TransportError: On any network, HTTP or decoding failure.
        """
        payload = self._get("breeds", params={"limit": limit, "page": page})
        return self._parse_breeds(payload, "breeds page")

    def list_all(self) -> list[CatBreed]:
        """Get the complete breed catalog."""
        payload = self._get("breeds")
        return self._parse_breeds(payload, "breeds")

    def get_image(self, image_id: str) -> CatImage:
        """
        Get a reference image by id.

        Raises:
            TransportError: On failure, including a 404 for an unknown id.
        """
        payload = self._get(f"images/{image_id}")
        try:
            return CatImage.from_api(payload)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise TransportError(
                f"Malformed image response for {image_id}: {e}",
                details={"image_id": image_id, "original_error": str(e)}
            ) from e

    def search(self, query: str) -> list[CatBreed]:
        """Search breeds by name."""
        payload = self._get("breeds/search", params={"q": query})
        return self._parse_breeds(payload, "search results")

    # =========================================================================
    # Helpers
    # =========================================================================

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = urljoin(self.base_url, path)
        logger.debug(f"GET {url} {params or ''}")

        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
        except requests.Timeout as e:
            raise TransportError(
                f"Request timeout while fetching {path}",
                details={"url": url, "original_error": str(e)}
            ) from e
        except requests.ConnectionError as e:
            raise TransportError(
                f"Network connection error while fetching {path}: {e}",
                details={"url": url, "original_error": str(e)}
            ) from e
        except requests.RequestException as e:
            raise TransportError(
                f"Request failed for {path}: {e}",
                details={"url": url, "original_error": str(e)}
            ) from e

        if response.status_code == 429:
            raise TransportError(
                f"Rate limited while fetching {path}",
                details={"url": url, "http_status": 429},
                http_status=429,
                is_rate_limit=True
            )

        if not 200 <= response.status_code < 300:
            raise TransportError(
                f"Failed to fetch {path}: HTTP {response.status_code} {response.reason or ''}".rstrip(),
                details={"url": url, "http_status": response.status_code},
                http_status=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"Invalid JSON in response for {path}",
                details={"url": url, "original_error": str(e)},
                http_status=response.status_code
            ) from e

    @staticmethod
    def _parse_breeds(payload: Any, what: str) -> list[CatBreed]:
        if not isinstance(payload, list):
            raise TransportError(
                f"Unexpected {what} response: expected a list",
                details={"type": type(payload).__name__}
            )

        breeds = []
        for item in payload:
            if not isinstance(item, dict) or not item.get("id"):
                logger.debug(f"Skipping malformed breed entry in {what}: {item!r}")
                continue
            breeds.append(CatBreed.from_api(item))
        return breeds
