"""
Pagination math for the breed listing.

Pages are windows over the cache's name ordering, not over remote page
boundaries: page p of size n covers offset p * n. The total page count is
derived from whichever breed count is the best available (see
CatalogSyncEngine.resolve_total_count).
"""

from dataclasses import dataclass


def total_pages(total_count: int, page_size: int) -> int:
    """
    Ceiling division of total_count by page_size, never less than 1.

    Example:
        total_pages(67, 10) == 7
        total_pages(0, 10) == 1
    """
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")
    if total_count <= 0:
        return 1
    return (total_count + page_size - 1) // page_size


def clamp_page(page: int, pages: int) -> int:
    """Clamp a page index into [0, pages - 1]."""
    return max(0, min(page, pages - 1))


@dataclass(frozen=True)
class PageWindow:
    """
    Position of one page within the listing.

    Attributes:
        page: Zero-based page index.
        page_size: Breeds per page.
        total_count: Breed count the page math is based on.
    """

    page: int
    page_size: int
    total_count: int

    @property
    def offset(self) -> int:
        return self.page * self.page_size

    @property
    def total_pages(self) -> int:
        return total_pages(self.total_count, self.page_size)

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages - 1

    @property
    def has_previous_page(self) -> bool:
        return self.page > 0

    @property
    def last_page(self) -> int:
        return self.total_pages - 1

    def clamp(self, page: int) -> int:
        return clamp_page(page, self.total_pages)
