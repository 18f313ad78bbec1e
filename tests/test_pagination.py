"""
Tests for page requests and page arithmetic.
"""

import pytest
from sample_models import Book

from mdd_rest.entities import Pageable, ParamsAwarePage, SortOrder
from mdd_rest.exceptions import BadRequestError
from mdd_rest.pagination import build_pageable, parse_sort


def test_parse_sort(registry):
    book_info = registry.get_entry_for(Book)

    orders = parse_sort("-published, title", book_info)

    assert orders == (SortOrder("published", descending=True), SortOrder("title"))
    assert [str(order) for order in orders] == ["-published", "title"]


def test_parse_sort_rejects_non_columns(registry):
    book_info = registry.get_entry_for(Book)

    with pytest.raises(BadRequestError, match="Cannot sort Book by 'author'"):
        parse_sort("author", book_info)
    with pytest.raises(BadRequestError):
        parse_sort("nope", book_info)


def test_build_pageable_defaults_to_id_sort(registry):
    pageable = build_pageable(None, None, None, registry.get_entry_for(Book))

    assert pageable.page == 0
    assert pageable.size == 10
    assert pageable.sort == (SortOrder("id"),)


def test_build_pageable_caps_size():
    assert build_pageable(2, 500, max_size=50).size == 50
    assert build_pageable(2, 20).offset == 40


@pytest.mark.parametrize(("page", "size"), [(-1, 10), (0, 0), ("-1", None), ("abc", None), (None, "ten")])
def test_build_pageable_bounds(page, size):
    with pytest.raises(BadRequestError):
        build_pageable(page, size)


def test_page_arithmetic():
    page = ParamsAwarePage(content=["a", "b"], pageable=Pageable(page=1, size=2), total_elements=5)

    assert page.total_pages == 3
    assert page.number_of_elements == 2
    assert page.has_previous and page.has_next
    assert not page.is_first and not page.is_last


def test_single_page():
    page = ParamsAwarePage(content=["a"], pageable=Pageable(page=0, size=10), total_elements=1)

    assert page.total_pages == 1
    assert page.is_first and page.is_last


def test_empty_page():
    page = ParamsAwarePage(content=[], pageable=Pageable(page=0, size=10), total_elements=0)

    assert page.total_pages == 0
    assert page.is_first and page.is_last


def test_build_pageable_parses_query_strings():
    pageable = build_pageable("3", "25")

    assert pageable.page == 3
    assert pageable.size == 25
