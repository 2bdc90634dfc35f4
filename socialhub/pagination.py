"""
Offset pagination shared by every list endpoint.
"""

import math
from dataclasses import dataclass
from typing import Any, List, Tuple


@dataclass
class Page:
    items: List[Any]
    total: int
    page: int
    limit: int
    pages: int

    def as_dict(self, key: str, items=None) -> dict:
        return {
            key: self.items if items is None else items,
            "total": self.total,
            "page": self.page,
            "pages": self.pages,
        }


def clamp(page, limit, max_limit: int, default_limit: int) -> Tuple[int, int]:
    """
    Normalize raw page/limit values: page >= 1 and 1 <= limit <= max_limit.
    Missing, zero or non-numeric values fall back to page 1 and default_limit.
    """
    try:
        page = int(page)
    except (TypeError, ValueError):
        page = 1
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        limit = default_limit

    page = max(page, 1)
    if limit == 0:
        limit = default_limit
    limit = min(max(limit, 1), max_limit)
    return page, limit


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0


def paginate(queryset, page, limit, page_size: Tuple[int, int]) -> Page:
    """
    Slice an ordered queryset using a (default limit, max limit) pair from
    socialhub.constants. Pages past the end come back empty.
    """
    default_limit, max_limit = page_size
    page, limit = clamp(page, limit, max_limit, default_limit)
    skip = (page - 1) * limit
    total = queryset.count()
    items = list(queryset[skip : skip + limit]) if skip < total else []
    return Page(
        items=items,
        total=total,
        page=page,
        limit=limit,
        pages=page_count(total, limit),
    )
