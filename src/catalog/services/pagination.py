"""Page-based slicing of the product list for the catalog view."""

import math
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_PAGE_LIMIT = 5


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of items plus the numbers the view needs for navigation."""

    items: List[T]
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    def meta(self) -> Dict[str, Any]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
            "hasNext": self.has_next,
            "hasPrev": self.has_prev,
        }


def parse_page_number(raw: Any) -> int:
    """Parse a page query value; anything unusable or below 1 becomes 1."""
    try:
        page = int(raw)
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


def paginate(items: Sequence[T], page: int = 1, limit: int = DEFAULT_PAGE_LIMIT) -> Page[T]:
    """
    Slice an already ordered sequence into one page.

    Args:
        items: Full ordered list, e.g. the result of DataSource.get_all().
        page: 1-based page number; values below 1 are treated as 1.
        limit: Page size, must be positive.

    Returns:
        Page with items[(page-1)*limit : page*limit] and navigation flags.
    """
    if limit <= 0:
        raise ValueError(f"limit must be positive, got {limit}")
    page = max(1, page)

    total = len(items)
    total_pages = math.ceil(total / limit)
    start = (page - 1) * limit

    return Page(
        items=list(items[start:start + limit]),
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )
