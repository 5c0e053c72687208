"""Offset-based pagination.

``Pages`` holds three numbers (total elements, elements per page and
the current 1-based page) and derives everything else on demand::

    pages = Pages(total_elements=len(rows)).pagination_params(request.query)
    visible = pages.paginate(rows)
    window = pages.page_range(5)

Query parameters are permissive: ``limit`` and ``page`` that fail to
parse count as 0. A page size that ends up zero or negative raises
``InvalidPageSize`` instead of dividing by zero.
"""

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from ron.errors import InvalidPageSize, SliceBoundsError

DEFAULT_LIMIT = 20


# ASCII digits with an optional sign; anything else parses as 0
_INT = re.compile(r"[+-]?[0-9]+")


def _atoi(value: str) -> int:
    if _INT.fullmatch(value) is None:
        return 0
    return int(value)


@dataclass(frozen=True, slots=True)
class Page:
    """One entry of a pager widget."""

    number: int
    active: bool = False


@dataclass(slots=True)
class Pages:
    """Pagination state for one request."""

    total_elements: int = 0
    elements_per_page: int = 0
    actual_page: int = 0

    def pagination_params(self, params: Mapping[str, str]) -> Pages:
        """Read ``limit`` and ``page`` from *params* into this object.

        Blank ``limit`` keeps the current page size (or 20); blank or
        ``"0"`` ``page`` keeps the current page (or 1). Returns ``self``.
        """
        limit = params.get("limit", "")
        page = params.get("page", "")

        if limit == "":
            limit = str(self.elements_per_page) if self.elements_per_page != 0 else str(DEFAULT_LIMIT)
        if page in ("", "0"):
            page = str(self.actual_page) if self.actual_page != 0 else "1"

        limit_int = _atoi(limit)
        page_int = _atoi(page)
        if limit_int <= 0:
            msg = f"page size must be positive, got limit={limit!r}"
            raise InvalidPageSize(msg)

        offset = (page_int - 1) * limit_int
        self.elements_per_page = limit_int
        self.actual_page = offset // limit_int + 1
        return self

    def _per_page(self) -> int:
        if self.elements_per_page <= 0:
            msg = f"elements_per_page must be positive, got {self.elements_per_page}"
            raise InvalidPageSize(msg)
        return self.elements_per_page

    def total_pages(self) -> int:
        per_page = self._per_page()
        return (self.total_elements + per_page - 1) // per_page

    def current_page(self) -> int:
        return self.actual_page

    def paginate[T](self, items: Sequence[T]) -> Sequence[T]:
        """Return the slice of *items* shown on the current page.

        The page is clamped into ``[1, total_pages()]`` first, so 999
        yields the last page and -1 the first. The final page stops at
        ``total_elements``. Raises ``SliceBoundsError`` when *items* is
        shorter than ``total_elements`` claims.
        """
        per_page = self._per_page()
        total_pages = self.total_pages()
        if total_pages == 0:
            return items[0:0]

        page = min(max(self.actual_page, 1), total_pages)
        start = (page - 1) * per_page
        end = min(start + per_page, self.total_elements)
        if end > len(items):
            msg = (
                f"page {page} needs items [{start}:{end}] but the collection "
                f"has {len(items)} (total_elements={self.total_elements})"
            )
            raise SliceBoundsError(msg)
        return items[start:end]

    def is_first(self) -> bool:
        return self.actual_page == 1

    def is_last(self) -> bool:
        return self.actual_page == self.total_pages()

    def has_previous(self) -> bool:
        return self.actual_page > 1

    def has_next(self) -> bool:
        return self.actual_page < self.total_pages()

    def previous(self) -> int:
        total_pages = self.total_pages()
        if self.actual_page > total_pages:
            return total_pages
        return self.actual_page - 1

    def next(self) -> int:
        if self.actual_page < 1:
            return 1
        return self.actual_page + 1

    def go_to_page(self, page: int) -> int:
        """Clamp *page* into ``[1, total_pages()]``."""
        total_pages = self.total_pages()
        if page < 1:
            return 1
        if page > total_pages:
            return total_pages
        return page

    def first(self) -> int:
        return self.go_to_page(1)

    def last(self) -> int:
        return self.go_to_page(self.total_pages())

    def page_range(self, max_to_show: int) -> list[Page]:
        """Pager window of up to *max_to_show* pages around the current one.

        The window slides instead of shrinking at either edge: with 10
        pages and a width of 5, page 1 shows 1..5 and page 10 shows 6..10.
        """
        total_pages = self.total_pages()

        start = self.actual_page - max_to_show // 2
        end = start + max_to_show - 1

        if start < 1:
            start = 1
            end = max_to_show
        if end > total_pages:
            end = total_pages
            start = max(total_pages - max_to_show + 1, 1)

        return [Page(number=n, active=n == self.actual_page) for n in range(start, end + 1)]
