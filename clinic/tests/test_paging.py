import pytest

from clinic.services.paging import MAX_LIMIT, paginate

ITEMS = list(range(45))


def test_without_parameters_everything_is_one_page():
    items, meta = paginate(ITEMS)
    assert items == ITEMS
    assert meta == {'total': 45, 'page': 1, 'limit': 45, 'totalPages': 1}


@pytest.mark.parametrize('page,limit,expected,pages', [
    (1, 10, list(range(10)), 5),
    (5, 10, list(range(40, 45)), 5),
    (6, 10, [], 5),
    (2, None, list(range(20, 40)), 3),
    (None, 50, ITEMS, 1),
])
def test_slices_one_page(page, limit, expected, pages):
    items, meta = paginate(ITEMS, page=page, limit=limit)
    assert items == expected
    assert meta['totalPages'] == pages
    assert meta['total'] == 45


def test_limit_is_capped():
    _, meta = paginate(ITEMS, limit=MAX_LIMIT + 500)
    assert meta['limit'] == MAX_LIMIT


def test_empty_list():
    assert paginate([], page=1, limit=10) == ([], {'total': 0, 'page': 1, 'limit': 10, 'totalPages': 1})
