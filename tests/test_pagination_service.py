import itertools

import pytest

from issuedesk.config import DEFAULT_PAGE_SIZE
from issuedesk.services import pagination_service
from issuedesk.state import Pagination


def test_total_pages_rounds_up_and_never_below_one():
    assert pagination_service.total_pages(250, 100) == 3
    assert pagination_service.total_pages(200, 100) == 2
    assert pagination_service.total_pages(0, 100) == 1


def test_last_page_holds_the_remainder():
    items = list(range(250))
    rows, pages = pagination_service.paginate(items, 3, 100)
    assert pages == 3
    assert rows == list(range(200, 250))


def test_out_of_range_navigation_is_ignored():
    current = Pagination(page=1, limit=100)
    assert pagination_service.go_to_page(current, 5, pages=3) == current
    assert pagination_service.go_to_page(current, 0, pages=3) == current
    assert pagination_service.go_to_page(current, 3, pages=3).page == 3


def test_change_limit_resets_to_first_page():
    moved = pagination_service.change_limit(Pagination(page=3, limit=100), 500)
    assert moved == Pagination(page=1, limit=500)


def test_change_limit_rejects_unknown_sizes():
    with pytest.raises(ValueError):
        pagination_service.change_limit(Pagination(), 250)


def test_clamp_pulls_page_back_after_shrink():
    assert pagination_service.clamp(Pagination(page=4, limit=100), 2).page == 2
    assert pagination_service.clamp(Pagination(page=1, limit=100), 2).page == 1


def test_range_label():
    assert pagination_service.range_label(Pagination(page=3, limit=100), 250) == "201-250 of 250"
    assert pagination_service.range_label(Pagination(), 0) == "0 of 0"


def test_default_limit():
    assert Pagination().limit == DEFAULT_PAGE_SIZE == 100


@pytest.mark.parametrize("limit", [100, 200, 500])
def test_pages_cover_every_item_exactly_once(limit):
    for count in itertools.chain(range(0, 3), range(limit - 1, limit + 2), [limit * 3 + 7]):
        items = list(range(count))
        pages = pagination_service.total_pages(count, limit)
        assert pages >= 1
        assert pages == max(1, -(-count // limit))

        seen = []
        for page in range(1, pages + 1):
            rows, reported = pagination_service.paginate(items, page, limit)
            assert reported == pages
            assert len(rows) == min(limit, count - (page - 1) * limit)
            seen.extend(rows)
        assert seen == items


@pytest.mark.parametrize("pages", [1, 2, 7])
def test_navigation_stays_in_bounds(pages):
    current = Pagination(page=1, limit=100)
    for target in range(-2, pages + 3):
        moved = pagination_service.go_to_page(current, target, pages)
        assert 1 <= moved.page <= pages
        assert moved.page == (target if 1 <= target <= pages else current.page)
