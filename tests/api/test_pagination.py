"""
Tests for pagination clamping and the SQL window.
"""

import pytest

from bibliocore.api import DEFAULT_PER_PAGE, MAX_PAGE, MAX_PER_PAGE, Pagination


@pytest.mark.parametrize(
    "page_number,page_size",
    [
        (None, None),
        (0, 0),
        (-5, -5),
        (1, 1),
        (7, 100),
        (10**9, 10**9),
        (3, 101),
    ],
)
def test_resolved_values_are_always_in_range(page_number, page_size):
    pagination = Pagination(page_number, page_size)
    assert 1 <= pagination.page <= MAX_PAGE
    assert 1 <= pagination.size <= MAX_PER_PAGE


def test_defaults():
    assert Pagination().limit_offset() == (DEFAULT_PER_PAGE, 0, 1, DEFAULT_PER_PAGE)


def test_size_above_maximum_is_clamped():
    assert Pagination(1, 500).size == MAX_PER_PAGE


def test_zero_size_becomes_one():
    assert Pagination(1, 0).size == 1


def test_offset_follows_page_and_size():
    assert Pagination(4, 25).limit_offset() == (25, 75, 4, 25)


def test_huge_page_is_clamped_and_offset_fits_a_signed_64_bit_integer():
    limit, offset, page, per_page = Pagination(10**20, 500).limit_offset()
    assert page == MAX_PAGE
    assert per_page == limit == MAX_PER_PAGE
    assert offset == (MAX_PAGE - 1) * MAX_PER_PAGE
    assert offset <= 2**63 - 1


def test_pagination_is_immutable():
    pagination = Pagination(1, 10)
    with pytest.raises(AttributeError):
        pagination.page_number = 2
