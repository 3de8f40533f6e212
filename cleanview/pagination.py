"""
Fixed-size paging over preview rows.
"""

import math
from typing import Sequence, Tuple, TypeVar

T = TypeVar('T')

DEFAULT_PAGE_SIZE = 5


class Paginator:
    """Slices a row sequence into 1-indexed pages."""

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.page_size = page_size

    def page_count(self, total: int) -> int:
        return max(1, math.ceil(total / self.page_size))

    def clamp(self, page: int, total: int) -> int:
        return min(max(1, page), self.page_count(total))

    def bounds(self, page: int, total: int) -> Tuple[int, int]:
        """Start (inclusive) and end (exclusive) indices of the clamped page."""
        page = self.clamp(page, total)
        start = self.page_size * (page - 1)
        return start, min(start + self.page_size, total)

    def page(self, rows: Sequence[T], page: int) -> Sequence[T]:
        start, end = self.bounds(page, len(rows))
        return rows[start:end]
