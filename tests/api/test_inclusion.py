"""
Tests for relationship inclusion.

Covers:
- Relation selection by include name and alias
- Per-request lookup cache (hits, misses, distinct keys)
- Collection and custom relations
- Row-to-string conversion of side-table rows
"""

from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from bibliocore.api import (
    CollectionRelation,
    CustomRelation,
    InclusionResolver,
    LookupRelation,
    row_to_string_map,
)
from bibliocore.errors import DBError

GMD = LookupRelation("gmd", "gmd_id", "SELECT * FROM mst_gmd WHERE gmd_id = ?")
PLACE = LookupRelation(
    "place", "publish_place_id", "SELECT * FROM mst_place WHERE place_id = ?", positive_only=True
)
ATTACHMENTS = CollectionRelation(
    "attachments", "biblio_id", "SELECT * FROM biblio_attachment WHERE biblio_id = ?", aliases=("files",)
)
CUSTOM = CustomRelation("biblio_id", "SELECT * FROM biblio_custom WHERE biblio_id = ?")


@pytest.fixture
def lookup_executor():
    executor = AsyncMock()
    executor.fetch_optional.side_effect = lambda sql, key: {"id": key}
    executor.fetch_all.side_effect = lambda sql, clauses, key: [{"file_id": key}]
    return executor


class TestSelection:
    def test_only_requested_relations(self, lookup_executor):
        resolver = InclusionResolver(lookup_executor, [GMD, PLACE, ATTACHMENTS], {"gmd"})
        assert resolver.relations == [GMD]
        assert set(resolver.caches) == {"gmd"}

    def test_alias_selects_relation(self, lookup_executor):
        resolver = InclusionResolver(lookup_executor, [GMD, ATTACHMENTS], {"files"})
        assert resolver.relations == [ATTACHMENTS]
        assert resolver.caches == {}

    @pytest.mark.asyncio
    async def test_nothing_requested(self, lookup_executor):
        resolver = InclusionResolver(lookup_executor, [GMD], frozenset())
        assert await resolver.resolve({"gmd_id": 1}) == {}
        lookup_executor.fetch_optional.assert_not_awaited()


class TestLookupCache:
    @pytest.mark.asyncio
    async def test_repeated_key_is_fetched_once(self, lookup_executor):
        rows = [{"gmd_id": 1}, {"gmd_id": 1}, {"gmd_id": 2}, {"gmd_id": 1}]
        resolver = InclusionResolver(lookup_executor, [GMD], {"gmd"})

        resolved = await resolver.resolve_many(rows)

        assert [r["gmd"] for r in resolved] == [{"id": 1}, {"id": 1}, {"id": 2}, {"id": 1}]
        assert resolver.lookup_count == 2
        assert lookup_executor.fetch_optional.await_count == 2

    @pytest.mark.asyncio
    async def test_misses_are_cached(self):
        executor = AsyncMock()
        executor.fetch_optional.return_value = None
        resolver = InclusionResolver(executor, [GMD], {"gmd"})

        resolved = await resolver.resolve_many([{"gmd_id": 9}, {"gmd_id": 9}])

        assert resolved == [{"gmd": None}, {"gmd": None}]
        assert resolver.caches["gmd"] == {9: None}
        assert executor.fetch_optional.await_count == 1

    @pytest.mark.asyncio
    async def test_null_key_skips_lookup(self, lookup_executor):
        resolver = InclusionResolver(lookup_executor, [GMD], {"gmd"})
        assert await resolver.resolve({"gmd_id": None}) == {"gmd": None}
        assert resolver.lookup_count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [0, -1])
    async def test_positive_only_skips_unset_ids(self, lookup_executor, value):
        resolver = InclusionResolver(lookup_executor, [PLACE], {"place"})
        assert await resolver.resolve({"publish_place_id": value}) == {"place": None}
        lookup_executor.fetch_optional.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_caches_are_per_resolver(self, lookup_executor):
        first = InclusionResolver(lookup_executor, [GMD], {"gmd"})
        second = InclusionResolver(lookup_executor, [GMD], {"gmd"})
        await first.resolve({"gmd_id": 1})
        await second.resolve({"gmd_id": 1})
        assert first.caches is not second.caches
        assert lookup_executor.fetch_optional.await_count == 2

    @pytest.mark.asyncio
    async def test_lookup_failure_propagates(self):
        executor = AsyncMock()
        executor.fetch_optional.side_effect = DBError()
        resolver = InclusionResolver(executor, [GMD], {"gmd"})
        with pytest.raises(DBError):
            await resolver.resolve({"gmd_id": 1})


class TestCollectionAndCustom:
    @pytest.mark.asyncio
    async def test_collection_is_not_cached(self, lookup_executor):
        resolver = InclusionResolver(lookup_executor, [ATTACHMENTS], {"attachments"})
        await resolver.resolve_many([{"biblio_id": 4}, {"biblio_id": 4}])
        assert lookup_executor.fetch_all.await_count == 2
        assert resolver.lookup_count == 2

    @pytest.mark.asyncio
    async def test_collection_null_key(self, lookup_executor):
        resolver = InclusionResolver(lookup_executor, [ATTACHMENTS], {"attachments"})
        assert await resolver.resolve({"biblio_id": None}) == {"attachments": []}
        lookup_executor.fetch_all.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_custom_row_is_stringified(self):
        executor = AsyncMock()
        executor.fetch_optional.return_value = {"biblio_id": 3, "shelf": None, "price": Decimal("1.50")}
        resolver = InclusionResolver(executor, [CUSTOM], {"custom"})
        resolved = await resolver.resolve({"biblio_id": 3})
        assert resolved == {"custom": {"biblio_id": "3", "shelf": None, "price": "1.50"}}

    @pytest.mark.asyncio
    async def test_custom_missing_row(self):
        executor = AsyncMock()
        executor.fetch_optional.return_value = None
        resolver = InclusionResolver(executor, [CUSTOM], {"custom"})
        assert await resolver.resolve({"biblio_id": 3}) == {"custom": None}


def test_row_to_string_map():
    row = {
        "a": "text",
        "b": 12,
        "c": None,
        "d": b"bytes",
        "e": date(2024, 1, 31),
        "f": datetime(2024, 1, 31, 8, 30),
        "g": Decimal("10.00"),
    }
    assert row_to_string_map(row) == {
        "a": "text",
        "b": "12",
        "c": None,
        "d": "bytes",
        "e": "2024-01-31",
        "f": "2024-01-31T08:30:00",
        "g": "10.00",
    }
