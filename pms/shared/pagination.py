import math
from typing import Optional, TypedDict


class PageMeta(TypedDict):
    total: int
    last_page: int
    current_page: int
    per_page: int
    prev: Optional[int]
    next: Optional[int]


def paginate(page: int, limit: int, total: int) -> PageMeta:
    """Build the pagination block returned next to listed items."""
    if page < 1 or limit < 1:
        raise ValueError("page and limit must be positive")

    last_page = math.ceil(total / limit)
    return {
        "total": total,
        "last_page": last_page,
        "current_page": page,
        "per_page": limit,
        "prev": page - 1 if page > 1 else None,
        "next": page + 1 if page < last_page else None,
    }


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit
