from typing import Optional, Sequence, TypeVar

T = TypeVar('T')

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def paginate(items: Sequence[T], *, page: Optional[int] = None, limit: Optional[int] = None) -> tuple[list[T], dict]:
    """Slice one page out of ``items``.

    Returns the page and its metadata (``total``, ``page``, ``limit``,
    ``totalPages``).  When neither ``page`` nor ``limit`` is given the whole
    list is returned as a single page.
    """
    total = len(items)
    if not page and not limit:
        return list(items), {'total': total, 'page': 1, 'limit': total, 'totalPages': 1}

    page = max(1, int(page or 1))
    limit = min(MAX_LIMIT, max(1, int(limit or DEFAULT_LIMIT)))
    start = (page - 1) * limit
    meta = {
        'total': total,
        'page': page,
        'limit': limit,
        'totalPages': max(1, (total + limit - 1) // limit),
    }
    return list(items[start:start + limit]), meta
