"""Page/limit clamping shared by the list endpoints."""

from __future__ import annotations

import math
from typing import Any


def clamp_page(page: int | None, limit: int | None, *, default_limit: int, max_limit: int) -> tuple[int, int]:
    """Return ``(page, limit)`` with page >= 1 and 1 <= limit <= max_limit.

    Examples:
        >>> clamp_page(None, None, default_limit=10, max_limit=100)
        (1, 10)
        >>> clamp_page(0, 500, default_limit=10, max_limit=100)
        (1, 100)
    """
    page = max(1, page or 1)
    limit = min(max(1, limit or default_limit), max_limit)
    return page, limit


def pagination_meta(page: int, limit: int, total: int) -> dict[str, Any]:
    return {
        "current_page": page,
        "total_items": total,
        "total_pages": math.ceil(total / limit),
        "items_per_page": limit,
    }
