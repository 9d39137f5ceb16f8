"""
Immutable view states published by the view models.

Each state is a frozen dataclass; view models publish a new value through
a StateChannel on every step instead of mutating a shared object.
"""

from dataclasses import dataclass

from catbreeds.api.models import CatBreed


@dataclass(frozen=True)
class BreedListState:
    """
    State of the paginated breed list screen.

    Attributes:
        breeds: Breeds currently shown (a page, or search results).
        is_loading: True while a page or search load is in flight.
        error: Human-readable message of the last failed load, else None.
        current_page: Zero-based index of the shown page.
        total_pages: Page count derived from total_count.
        total_count: Breed count the page math is based on.
        has_next_page: current_page < total_pages - 1 (False during search).
        has_previous_page: current_page > 0 (False during search).
        is_online: Result of the last connectivity probe or classification.
        is_offline_data: True when shown breeds came from the cache while offline.
        has_cached_data: True if the cache holds at least one breed.
        search_query: Active search, None when showing pages.
        favorites: Cached favorite breeds, ordered by name.
    """

    breeds: tuple[CatBreed, ...] = ()
    is_loading: bool = False
    error: str | None = None
    current_page: int = 0
    total_pages: int = 1
    total_count: int = 0
    has_next_page: bool = False
    has_previous_page: bool = False
    is_online: bool = False
    is_offline_data: bool = False
    has_cached_data: bool = False
    search_query: str | None = None
    favorites: tuple[CatBreed, ...] = ()

    @property
    def is_searching(self) -> bool:
        return self.search_query is not None

    @property
    def favorite_ids(self) -> frozenset[str]:
        return frozenset(b.id for b in self.favorites)


@dataclass(frozen=True)
class BreedDetailsState:
    """State of the breed details screen."""

    breed: CatBreed | None = None
    is_loading: bool = False
    error: str | None = None


@dataclass(frozen=True)
class FavoritesState:
    """State of the favorites screen."""

    breeds: tuple[CatBreed, ...] = ()
    error: str | None = None

    @property
    def count(self) -> int:
        return len(self.breeds)
