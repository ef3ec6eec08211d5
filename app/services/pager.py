# =============================================================================
# Pager — Window + Pagination Metadata
# =============================================================================
#
#   offset      = (page - 1) * page_size
#   total_pages = ceil(total_count / page_size)
#   has_next    = page < total_pages
#   has_prev    = page > 1
#
# Pages past the end are not an error. They produce an empty window and the
# caller sees `has_next=False` and `page > total_pages`.
#
# Input is clamped, never rejected: page < 1 becomes 1, page_size < 1
# becomes 1, and page_size above the configured maximum becomes the maximum.
# =============================================================================

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class PageMeta:
    page: int
    page_size: int
    total_count: int
    total_pages: int
    offset: int
    has_next: bool
    has_prev: bool

    @property
    def limit(self) -> int:
        return self.page_size

    @property
    def display_total_pages(self) -> int:
        """An empty result is shown as one page with no rows."""
        return max(self.total_pages, 1)

    @property
    def out_of_range(self) -> bool:
        return self.page > self.display_total_pages


def paginate(
    total_count: int,
    page: int,
    page_size: int,
    max_page_size: int | None = None,
) -> PageMeta:
    page = max(page, 1)
    page_size = max(page_size, 1)
    if max_page_size is not None:
        page_size = min(page_size, max_page_size)
    total_count = max(total_count, 0)

    total_pages = math.ceil(total_count / page_size)

    return PageMeta(
        page=page,
        page_size=page_size,
        total_count=total_count,
        total_pages=total_pages,
        offset=(page - 1) * page_size,
        has_next=page < total_pages,
        has_prev=page > 1,
    )
