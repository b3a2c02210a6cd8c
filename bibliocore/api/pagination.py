"""
Pagination utilities for list endpoints.

Page number and page size arrive untrusted from the query string; they are
never rejected for being out of range, only clamped: the page number into
``[1, MAX_PAGE]`` and the page size into ``[1, MAX_PER_PAGE]``. MAX_PAGE keeps
the largest offset within the range of an unsigned 32-bit page number, well
inside a signed 64-bit bind value.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 20
MAX_PER_PAGE = 100
MAX_PAGE = 2**32 - 1


@dataclass(frozen=True)
class Pagination:
    """
    Requested page of a list query.

    Attributes:
        page_number: Raw 1-based page number, or None when absent
        page_size: Raw page size, or None when absent

    Example:
        ```python
        limit, offset, page, per_page = Pagination(3, 25).limit_offset()
        # (25, 50, 3, 25)
        ```
    """

    page_number: Optional[int] = None
    page_size: Optional[int] = None

    @property
    def page(self) -> int:
        """Resolved page number, always within ``[1, MAX_PAGE]``."""
        number = DEFAULT_PAGE if self.page_number is None else self.page_number
        return min(max(number, 1), MAX_PAGE)

    @property
    def size(self) -> int:
        """Resolved page size, always within ``[1, MAX_PER_PAGE]``."""
        size = DEFAULT_PER_PAGE if self.page_size is None else self.page_size
        return min(max(size, 1), MAX_PER_PAGE)

    def limit_offset(self) -> Tuple[int, int, int, int]:
        """
        Compute the SQL window for this page.

        Returns:
            ``(limit, offset, page, per_page)``
        """
        page, per_page = self.page, self.size
        return per_page, (page - 1) * per_page, page, per_page
