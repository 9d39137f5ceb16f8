"""
Catalog sync engine for catbreeds.

This module reconciles the remote Cat API with the local SQLite cache.
Every read goes online first and degrades to cached data when the remote
call fails, while the user's favorite flags (which the API knows nothing
about) survive every refresh.

Pipeline (fetch_and_merge):
    1. Remote list call (page, full catalog or search). A failure here
       ends the pipeline; nothing is enriched or written.
    2. Enrichment: one image lookup per breed with a reference_image_id,
       fanned out over a bounded thread pool. A failed lookup leaves that
       breed without an image and never fails the batch. Output order
       always matches the remote response order.
    3. Merge: each breed inherits is_favorite from its cached row (False
       for new breeds), then the whole batch is upserted in one transaction.

Read paths (get_breeds, search_breeds):
    remote ok  -> fetch_and_merge -> read the window back from the cache
    remote err -> read the window from the cache
    both fail  -> the remote error is reported, the cache error is logged

Reading back from the cache after a successful sync, instead of returning
the in-memory batch, means callers always see the stored favorite flags,
including toggles made concurrently from elsewhere.

All public methods return Success/Failure results and never raise
CatalogError to the caller.

Usage:
    engine = CatalogSyncEngine(CatApiClient(config.api), Database(path), config.sync)

    count = engine.initialize_app_data()
    page = engine.get_breeds(page=2)
    engine.toggle_favorite("abys")
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable

from catbreeds.api.client import RemoteCatalog
from catbreeds.api.models import CatBreed, CatImage
from catbreeds.core.config import SyncSettings
from catbreeds.core.database import Database, now_millis
from catbreeds.core.exceptions import CatalogError, NotFoundError
from catbreeds.core.logger import get_logger, log_sync_failure
from catbreeds.core.progress import EnrichmentProgressBar
from catbreeds.core.result import Failure, Result, Success
from catbreeds.sync.errors import ErrorPolicy, attempt

logger = get_logger(__name__)


class CountSource(Enum):
    """Where a total breed count came from, in priority order."""
    INITIALIZATION = "initialization"
    REMOTE = "remote"
    CACHE = "cache"
    ASSUMED = "assumed"


@dataclass(frozen=True)
class TotalCount:
    """A breed count and the source it was taken from."""
    value: int
    source: CountSource


class CatalogSyncEngine:
    """
    Online-first breed repository over a remote catalog and a local cache.

    Attributes:
        settings: Page size, assumed total and image worker bound.

    Thread Safety:
        Public methods may be called from several threads. The cache
        serializes writes; overlapping upserts of the same id are
        last-write-wins. No engine-level locking is done.
    """

    def __init__(
        self,
        remote: RemoteCatalog,
        database: Database,
        settings: SyncSettings | None = None
    ) -> None:
        self._remote = remote
        self._database = database
        self.settings = settings or SyncSettings()

    # =========================================================================
    # Fetch, enrich, merge
    # =========================================================================

    def fetch_and_merge(
        self,
        remote_call: Callable[[], list[CatBreed]],
        *,
        max_workers: int | None = None,
        progress: EnrichmentProgressBar | None = None
    ) -> Result[list[CatBreed]]:
        """
        Fetch a batch remotely, attach images, and cache it with favorites kept.

        Args:
            remote_call: Zero-argument callable returning the remote batch.
            max_workers: Image lookup thread bound for this call
                         (default: settings.max_image_workers).
            progress: Optional progress bar updated once per breed.

        Returns:
            Success(list[CatBreed]) with the merged batch in remote order,
            Failure(TransportError) if the remote call failed, or
            Failure(CacheError) if the batch could not be written.
        """
        fetched = attempt(remote_call)
        if not fetched.ok:
            return fetched

        breeds = fetched.value
        logger.debug(f"Fetched {len(breeds)} breeds, enriching")

        if progress is not None:
            progress.set_total(len(breeds))

        enriched = self._enrich(breeds, max_workers or self.settings.max_image_workers, progress)
        return attempt(self._merge_and_cache, enriched)

    def _enrich(
        self,
        breeds: list[CatBreed],
        max_workers: int,
        progress: EnrichmentProgressBar | None = None
    ) -> list[CatBreed]:
        """
        Resolve the reference image of every breed that has one.

        Lookups run concurrently on at most max_workers threads. Each
        lookup's failure is absorbed into image=None for that breed only.
        Breeds without reference_image_id are returned as-is.
        """
        results = list(breeds)
        pending = [i for i, breed in enumerate(breeds) if breed.reference_image_id]

        if progress is not None:
            for breed in breeds:
                if not breed.reference_image_id:
                    progress.update(resolved=breed.image is not None)

        if not pending:
            return results

        workers = max(1, min(len(pending), max_workers))
        failed = 0

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="image") as executor:
            future_to_index = {
                executor.submit(self._resolve_image, breeds[i].reference_image_id): i
                for i in pending
            }

            for future in as_completed(future_to_index):
                index = future_to_index[future]
                try:
                    image = future.result()
                except Exception as e:
                    logger.warning(
                        f"Image lookup for {breeds[index].id} raised "
                        f"{type(e).__name__}: {e}"
                    )
                    image = None
                if image is None:
                    failed += 1
                results[index] = replace(breeds[index], image=image)

                if progress is not None:
                    progress.update(resolved=image is not None)

        if failed:
            logger.info(f"{failed} of {len(pending)} image lookups failed, breeds kept without image")

        return results

    def _resolve_image(self, image_id: str) -> CatImage | None:
        """Look up one image; any remote failure degrades to None."""
        return attempt(
            self._remote.get_image, image_id,
            policy=ErrorPolicy.DEGRADE,
            default=None
        ).value

    def _merge_and_cache(self, breeds: list[CatBreed]) -> list[CatBreed]:
        """
        Carry cached favorite flags forward and upsert the batch.

        The upsert itself never overwrites a stored flag, so a toggle that
        lands between the read and the write survives.

        Raises:
            CacheError: If the existing rows cannot be read or the batch
                        cannot be written. The write is all-or-nothing.
        """
        stamp = now_millis()
        merged = []
        for breed in breeds:
            existing = self._database.get_breed(breed.id)
            merged.append(replace(
                breed,
                is_favorite=existing.is_favorite if existing is not None else False,
                last_updated=stamp,
            ))

        self._database.upsert_breeds(merged, timestamp=stamp)
        logger.debug(f"Cached {len(merged)} breeds")
        return merged

    # =========================================================================
    # Online-first reads
    # =========================================================================

    def initialize_app_data(self, progress: EnrichmentProgressBar | None = None) -> Result[int]:
        """
        Fetch, enrich and cache the full catalog.

        There is no cache fallback here: this runs once at startup and its
        count seeds the pagination math only when it succeeds.

        Returns:
            Success(int) with the number of breeds fetched, or the
            fetch_and_merge failure.
        """
        logger.info("Initializing breed catalog")
        synced = self.fetch_and_merge(self._remote.list_all, progress=progress)
        if not synced.ok:
            log_sync_failure(logger, "initialize", synced.error.message, None)
            return synced

        logger.info(f"Cached {len(synced.value)} breeds")
        return Success(len(synced.value))

    def is_online(self) -> bool:
        """Probe the API with the smallest possible page."""
        return attempt(self._remote.list_page, 1, 0).ok

    def get_breeds(self, limit: int | None = None, page: int = 0) -> Result[list[CatBreed]]:
        """
        Get one page of breeds, online first.

        Args:
            limit: Page size (default: settings.page_size).
            page: Zero-based page index.

        Returns:
            Success(list[CatBreed]) read from the cache ordered by name at
            offset page * limit, or Failure carrying the remote error when
            the cache fallback also failed.
        """
        limit = limit or self.settings.page_size
        if page < 0:
            page = 0
        offset = page * limit
        operation = f"list(limit={limit}, page={page})"

        synced = self.fetch_and_merge(lambda: self._remote.list_page(limit, page))
        if synced.ok:
            return attempt(self._database.get_breeds_paginated, limit, offset)

        return self._read_cache_fallback(
            operation, synced.error, self._database.get_breeds_paginated, limit, offset
        )

    def search_breeds(self, query: str) -> Result[list[CatBreed]]:
        """
        Search breeds by name, online first.

        The cache fallback (and the read-back after a successful remote
        search) is a case-insensitive substring match on name. A blank
        query matches nothing and makes no remote call.

        Returns:
            Success(list[CatBreed]) or Failure carrying the remote error.
        """
        query = query.strip()
        if not query:
            return Success([])

        operation = f"search(query={query!r})"

        synced = self.fetch_and_merge(lambda: self._remote.search(query))
        if synced.ok:
            return attempt(self._database.search_breeds, query)

        return self._read_cache_fallback(
            operation, synced.error, self._database.search_breeds, query
        )

    def _read_cache_fallback(
        self,
        operation: str,
        remote_error: CatalogError,
        read: Callable,
        *args
    ) -> Result[list[CatBreed]]:
        """
        Serve a failed read from the cache.

        The remote error stays primary: if the cache read fails too, the
        cache error is logged, recorded under the remote error's
        'suppressed_cache_error' detail, and Failure(remote_error) returned.
        """
        cached = attempt(read, *args)
        if cached.ok:
            log_sync_failure(logger, operation, remote_error.message, True, len(cached.value))
            return cached

        logger.warning(f"Cache fallback failed for {operation}: {cached.error.message}")
        remote_error.details.setdefault("suppressed_cache_error", cached.error.message)
        log_sync_failure(logger, operation, remote_error.message, False)
        return Failure(remote_error)

    # =========================================================================
    # Counts
    # =========================================================================

    def get_total_breeds_count(self) -> Result[int]:
        """
        Fresh remote breed count, falling back to the cached row count.

        Returns:
            Success(int), or Failure(remote error) if both sources failed.
        """
        remote = attempt(self._remote.list_all)
        if remote.ok:
            return Success(len(remote.value))

        cached = attempt(self._database.count_breeds)
        if cached.ok:
            logger.debug(f"Remote count unavailable, using cached count {cached.value}")
            return cached

        logger.warning(f"Cached count unavailable: {cached.error.message}")
        return Failure(remote.error)

    def resolve_total_count(self, initial_count: int | None, online: bool) -> TotalCount:
        """
        Pick the breed count that drives pagination.

        Priority:
            1. initial_count from initialize_app_data, if any and online
            2. a fresh remote count
            3. the cached row count
            4. settings.assumed_total when nothing else is available
        """
        if initial_count is not None and online:
            return TotalCount(initial_count, CountSource.INITIALIZATION)

        remote = attempt(self._remote.list_all)
        if remote.ok:
            return TotalCount(len(remote.value), CountSource.REMOTE)

        cached = attempt(self._database.count_breeds)
        if cached.ok:
            return TotalCount(cached.value, CountSource.CACHE)

        return TotalCount(self.settings.assumed_total, CountSource.ASSUMED)

    def get_cached_breeds_count(self) -> Result[int]:
        return attempt(self._database.count_breeds)

    def has_cached_data(self) -> bool:
        """True if at least one breed is cached; False if empty or unreadable."""
        return attempt(
            self._database.count_breeds, policy=ErrorPolicy.DEGRADE, default=0
        ).value > 0

    def get_last_update_time(self) -> Result[int | None]:
        """Success(epoch millis of the newest cache write, or None if empty)."""
        return attempt(self._database.get_last_update_time)

    # =========================================================================
    # Cache-only operations
    # =========================================================================

    def get_breed_by_id(self, breed_id: str) -> Result[CatBreed]:
        """Success(CatBreed) from the cache, or Failure(NotFoundError)."""
        found = attempt(self._database.get_breed, breed_id)
        if not found.ok:
            return found
        if found.value is None:
            return Failure(NotFoundError(
                f"Breed not found with ID: {breed_id}",
                details={"breed_id": breed_id}
            ))
        return found

    def toggle_favorite(self, breed_id: str) -> Result[bool]:
        """
        Flip the favorite flag of a cached breed.

        This is the only write that changes is_favorite and the only write
        that bypasses the merge step. Nothing else in the row is touched.

        Returns:
            Success(bool) with the new flag, or Failure(NotFoundError) when
            the id is not cached (no write is made).
        """
        current = self.get_breed_by_id(breed_id)
        if not current.ok:
            return current

        new_status = not current.value.is_favorite
        written = attempt(self._database.set_favorite, breed_id, new_status)
        if not written.ok:
            return written
        if not written.value:
            # Row vanished between read and write (cache cleared concurrently)
            return Failure(NotFoundError(
                f"Breed not found with ID: {breed_id}",
                details={"breed_id": breed_id}
            ))

        logger.info(f"{'Added' if new_status else 'Removed'} favorite: {breed_id}")
        return Success(new_status)

    def get_favorite_breeds(self) -> Result[list[CatBreed]]:
        return attempt(self._database.get_favorite_breeds)

    def get_favorite_breeds_count(self) -> Result[int]:
        return attempt(self._database.count_favorites)

    def clear_cache(self) -> Result[None]:
        """
        Delete every cached breed.

        Destructive: favorite flags are lost, and breeds synced afterwards
        start out as non-favorites.
        """
        cleared = attempt(self._database.clear_all)
        if cleared.ok:
            logger.info("Cache cleared")
        return cleared
