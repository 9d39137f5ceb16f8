"""
View models projecting engine results into immutable view states.

Each view model owns a StateChannel and publishes a fresh state value for
every step of an operation (loading, loaded, failed). Operations run
synchronously on the calling thread; a consumer that wants them in the
background runs them on its own thread and watches the channel.

BreedListViewModel rules:
    - Page jumps are clamped into [0, total_pages - 1].
    - Jumping to the page already shown, or while a load is in flight,
      does nothing and makes no engine call.
    - retry() repeats the last page load or search with the same arguments.
    - is_offline_data is set when a read succeeded but the connectivity
      probe failed, or when a failure message looks network-caused.
"""

import threading
from dataclasses import replace
from typing import Callable

from catbreeds.api.models import CatBreed
from catbreeds.core.config import SyncSettings
from catbreeds.core.logger import get_logger
from catbreeds.core.result import Result
from catbreeds.state.channel import StateChannel
from catbreeds.state.models import BreedDetailsState, BreedListState, FavoritesState
from catbreeds.sync.engine import CatalogSyncEngine, CountSource, TotalCount
from catbreeds.sync.errors import is_network_error
from catbreeds.sync.pagination import PageWindow, clamp_page

logger = get_logger(__name__)


def _with_favorite(breeds: tuple[CatBreed, ...], breed_id: str, is_favorite: bool) -> tuple[CatBreed, ...]:
    return tuple(
        replace(b, is_favorite=is_favorite) if b.id == breed_id else b
        for b in breeds
    )


class BreedListViewModel:
    """
    Paginated breed list with search and favorites.

    Attributes:
        channel: StateChannel[BreedListState] carrying the current state.
        total_count: The TotalCount the page math is based on.
    """

    def __init__(self, engine: CatalogSyncEngine, settings: SyncSettings | None = None) -> None:
        self._engine = engine
        self._settings = settings or engine.settings
        self.total_count = TotalCount(self._settings.assumed_total, CountSource.ASSUMED)
        window = PageWindow(0, self._settings.page_size, self.total_count.value)
        self.channel: StateChannel[BreedListState] = StateChannel(BreedListState(
            total_pages=window.total_pages,
            total_count=window.total_count,
            has_next_page=window.has_next_page,
        ))
        self._last_operation: Callable[[], None] | None = None
        self._load_lock = threading.Lock()

    @property
    def state(self) -> BreedListState:
        return self.channel.value

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def initialize(self) -> None:
        """
        Sync the full catalog, settle the total count, and show page 0.

        A failed initialization is not shown as an error by itself: the
        first page load then decides what the user sees (cache or error).
        """
        if not self._begin_load():
            return

        synced = self._engine.initialize_app_data()
        if not synced.ok:
            logger.warning(f"Initialization failed: {synced.error.message}")

        online = self._engine.is_online()
        self.total_count = self._engine.resolve_total_count(
            synced.value if synced.ok else None, online
        )
        logger.debug(f"Total count {self.total_count.value} from {self.total_count.source.value}")

        self.channel.update(lambda s: replace(
            s,
            is_online=online,
            has_cached_data=self._engine.has_cached_data(),
            total_count=self.total_count.value,
            total_pages=PageWindow(0, self._settings.page_size, self.total_count.value).total_pages,
        ))

        self._fetch_page(0)
        self.refresh_favorites()

    def _begin_load(self) -> bool:
        """Mark a load as in flight; False if one already is."""
        with self._load_lock:
            if self.channel.value.is_loading:
                return False
            self.channel.update(lambda s: replace(s, is_loading=True, error=None))
            return True

    # =========================================================================
    # Pages
    # =========================================================================

    def load_page(self, page: int) -> None:
        """Load a page (clamped), even if it is the page already shown."""
        if not self._begin_load():
            logger.debug(f"Load of page {page} ignored, a load is in flight")
            return
        self._fetch_page(clamp_page(page, self.state.total_pages))

    def go_to_page(self, page: int) -> bool:
        """
        Jump to a page.

        Returns:
            True if a load was started, False for a no-op (same page, or a
            load already in flight).
        """
        state = self.state
        target = clamp_page(page, state.total_pages)
        if state.is_loading or (target == state.current_page and not state.is_searching):
            return False
        if not self._begin_load():
            return False
        self._fetch_page(target)
        return True

    def go_to_first_page(self) -> bool:
        return self.go_to_page(0)

    def go_to_previous_page(self) -> bool:
        return self.go_to_page(self.state.current_page - 1)

    def go_to_next_page(self) -> bool:
        return self.go_to_page(self.state.current_page + 1)

    def go_to_last_page(self) -> bool:
        return self.go_to_page(self.state.total_pages - 1)

    def _fetch_page(self, page: int) -> None:
        self._last_operation = lambda: self._fetch_page(page)
        window = PageWindow(page, self._settings.page_size, self.total_count.value)
        result = self._engine.get_breeds(limit=window.page_size, page=page)

        if result.ok:
            online = self._engine.is_online()
            self.channel.update(lambda s: replace(
                s,
                breeds=tuple(result.value),
                is_loading=False,
                error=None,
                current_page=page,
                total_pages=window.total_pages,
                total_count=window.total_count,
                has_next_page=window.has_next_page,
                has_previous_page=window.has_previous_page,
                is_online=online,
                is_offline_data=not online,
                has_cached_data=s.has_cached_data or bool(result.value),
                search_query=None,
            ))
        else:
            self._publish_failure(result, current_page=page, search_query=None)

    def _publish_failure(self, result: Result, **changes) -> None:
        message = result.error.message
        network = is_network_error(message)
        self.channel.update(lambda s: replace(
            s,
            breeds=(),
            is_loading=False,
            error=message,
            is_online=False if network else s.is_online,
            is_offline_data=network,
            has_next_page=False,
            has_previous_page=False,
            **changes
        ))

    # =========================================================================
    # Search
    # =========================================================================

    def search(self, query: str) -> None:
        """Search by name; a blank query clears the search instead."""
        query = query.strip()
        if not query:
            self.clear_search()
            return
        if not self._begin_load():
            return
        self._run_search(query)

    def _run_search(self, query: str) -> None:
        self._last_operation = lambda: self._run_search(query)
        result = self._engine.search_breeds(query)

        if result.ok:
            online = self._engine.is_online()
            self.channel.update(lambda s: replace(
                s,
                breeds=tuple(result.value),
                is_loading=False,
                error=None,
                has_next_page=False,
                has_previous_page=False,
                is_online=online,
                is_offline_data=not online,
                search_query=query,
            ))
        else:
            self._publish_failure(result, search_query=query)

    def clear_search(self) -> None:
        """Leave search mode and reload the current page."""
        if not self._begin_load():
            return
        self._fetch_page(self.state.current_page)

    def retry(self) -> None:
        """Repeat the last page load or search with the same arguments."""
        operation = self._last_operation
        if operation is None:
            self.initialize()
            return
        if not self._begin_load():
            return
        operation()

    # =========================================================================
    # Favorites
    # =========================================================================

    def toggle_favorite(self, breed_id: str) -> bool | None:
        """
        Flip a breed's favorite flag and patch it into the shown list.

        Returns:
            The new flag, or None if the toggle failed (error is published).
        """
        result = self._engine.toggle_favorite(breed_id)
        if not result.ok:
            self.channel.update(lambda s: replace(s, error=result.error.message))
            return None

        self.channel.update(lambda s: replace(
            s, breeds=_with_favorite(s.breeds, breed_id, result.value)
        ))
        self.refresh_favorites()
        return result.value

    def refresh_favorites(self) -> None:
        result = self._engine.get_favorite_breeds()
        if result.ok:
            self.channel.update(lambda s: replace(s, favorites=tuple(result.value)))
        else:
            logger.warning(f"Could not load favorites: {result.error.message}")


class BreedDetailsViewModel:
    """Single cached breed with a favorite toggle."""

    def __init__(self, engine: CatalogSyncEngine) -> None:
        self._engine = engine
        self.channel: StateChannel[BreedDetailsState] = StateChannel(BreedDetailsState())

    @property
    def state(self) -> BreedDetailsState:
        return self.channel.value

    def load(self, breed_id: str) -> None:
        self.channel.publish(BreedDetailsState(is_loading=True))
        result = self._engine.get_breed_by_id(breed_id)
        if result.ok:
            self.channel.publish(BreedDetailsState(breed=result.value))
        else:
            self.channel.publish(BreedDetailsState(error=result.error.message))

    def toggle_favorite(self) -> bool | None:
        breed = self.state.breed
        if breed is None:
            return None

        result = self._engine.toggle_favorite(breed.id)
        if not result.ok:
            self.channel.update(lambda s: replace(s, error=result.error.message))
            return None

        self.channel.update(lambda s: replace(
            s, breed=replace(s.breed, is_favorite=result.value), error=None
        ))
        return result.value


class FavoritesViewModel:
    """Favorite breeds read from the cache, ordered by name."""

    def __init__(self, engine: CatalogSyncEngine) -> None:
        self._engine = engine
        self.channel: StateChannel[FavoritesState] = StateChannel(FavoritesState())

    @property
    def state(self) -> FavoritesState:
        return self.channel.value

    def refresh(self) -> None:
        result = self._engine.get_favorite_breeds()
        if result.ok:
            self.channel.publish(FavoritesState(breeds=tuple(result.value)))
        else:
            self.channel.update(lambda s: replace(s, error=result.error.message))

    def toggle_favorite(self, breed_id: str) -> bool | None:
        """Flip a flag; removing a favorite drops it from the list."""
        result = self._engine.toggle_favorite(breed_id)
        if not result.ok:
            self.channel.update(lambda s: replace(s, error=result.error.message))
            return None
        self.refresh()
        return result.value
