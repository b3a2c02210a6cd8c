"""
Tests for list parameter parsing.

Covers:
- Pagination keys, aliases and precedence
- Sparse fieldsets and filters (splitting, trimming, dropping empties)
- Include and sort parsing
- Rejection of non-numeric pagination
"""

import pytest
from starlette.datastructures import QueryParams

from bibliocore.api import MAX_PAGE, ListParams, SortOrder, parse_include
from bibliocore.errors import InvalidPaginationError


def test_empty_query_uses_defaults():
    params = ListParams.from_query({})
    assert params.pagination().limit_offset() == (20, 0, 1, 20)
    assert params.includes() == frozenset()
    assert params.fields == {}
    assert params.filters == {}
    assert params.sorts == ()


def test_bracketed_pagination_keys():
    params = ListParams.from_query({"page[number]": "3", "page[size]": "10"})
    assert params.pagination().limit_offset() == (10, 20, 3, 10)


def test_pagination_aliases():
    params = ListParams.from_query({"page": "2", "per_page": "5"})
    assert params.pagination().limit_offset() == (5, 5, 2, 5)


def test_bracketed_key_wins_over_alias():
    params = ListParams.from_query([("page", "9"), ("page[number]", "2")])
    assert params.pagination().page == 2


@pytest.mark.parametrize("key", ["page[number]", "page", "page[size]", "per_page"])
def test_non_numeric_pagination_is_rejected(key):
    with pytest.raises(InvalidPaginationError) as exc:
        ListParams.from_query({key: "abc"})
    assert exc.value.status_code == 400
    assert exc.value.parameter == key


def test_out_of_range_pagination_is_clamped_not_rejected():
    params = ListParams.from_query({"page[number]": "-4", "page[size]": "0"})
    assert params.pagination().page == 1
    assert params.pagination().size == 1


def test_page_number_beyond_any_offset_is_clamped():
    params = ListParams.from_query({"page[number]": "99999999999999999999"})
    assert params.pagination().page == MAX_PAGE


def test_last_occurrence_wins():
    query = QueryParams("sort=title&sort=-loan_date&filter[x]=1&filter[x]=2")
    params = ListParams.from_query(query)
    assert params.sorts == (SortOrder("loan_date", ascending=False),)
    assert params.filters == {"x": ("2",)}


def test_fieldsets_are_split_and_trimmed():
    params = ListParams.from_query({"fields[members]": " member_name , ,member_email"})
    assert params.fieldset("members") == {"member_name", "member_email"}
    assert params.fieldset("items") is None


def test_empty_fieldset_means_no_restriction():
    params = ListParams.from_query({"fields[members]": " , "})
    assert params.fieldset("members") is None


def test_filters_are_split_and_empty_filters_dropped():
    params = ListParams.from_query({"filter[member_id]": "a, b", "filter[empty]": ",, "})
    assert params.filters == {"member_id": ("a", "b")}


def test_unknown_bracketed_names_are_accepted():
    params = ListParams.from_query({"filter[nope]": "1", "fields[whatever]": "a"})
    assert "nope" in params.filters
    assert params.fieldset("whatever") == {"a"}


def test_unrelated_keys_are_ignored():
    params = ListParams.from_query({"keyword": "x", "filter": "y", "fields[]": "z"})
    assert params.filters == {}
    assert params.fields == {}


@pytest.mark.parametrize(
    "raw",
    ["Foo, bar,, BAR", "bar,foo", " FOO ,Bar ", "foo,foo,bar,,"],
)
def test_include_parsing_is_idempotent(raw):
    assert parse_include(raw) == {"foo", "bar"}
    assert ListParams.from_query({"include": raw}).includes() == {"foo", "bar"}


def test_include_absent_or_blank():
    assert parse_include(None) == frozenset()
    assert parse_include(" , ") == frozenset()


def test_sort_direction_parsing_preserves_order():
    params = ListParams.from_query({"sort": "-due_date,loan_id"})
    assert params.sorts == (
        SortOrder("due_date", ascending=False),
        SortOrder("loan_id", ascending=True),
    )


def test_params_are_read_only():
    params = ListParams.from_query({"filter[a]": "1"})
    with pytest.raises(TypeError):
        params.filters["b"] = ("2",)
    with pytest.raises(AttributeError):
        params.filters = {}
