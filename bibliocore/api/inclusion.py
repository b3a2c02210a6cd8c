"""
Relationship inclusion for resource endpoints.

Resources declare their includable relations once, at import time, as
immutable relation specs. A fresh ``InclusionResolver`` is built for every
request; it owns one lookup cache per cached relation, so the same foreign key
is never fetched twice within a request and nothing is shared between
requests.

Relation kinds:
- ``LookupRelation``: one related row by foreign key, cached (misses too)
- ``CollectionRelation``: every row pointing at the primary row, uncached
- ``CustomRelation``: the per-deployment ``*_custom`` side-table row,
  converted column by column to strings

Lookups run sequentially, row by row; any query failure fails the request.
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import (
    AbstractSet,
    Any,
    Dict,
    Hashable,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from bibliocore.api.binding import QueryExecutor

Record = Dict[str, Any]


def row_to_string_map(row: Mapping[str, Any]) -> Dict[str, Optional[str]]:
    """
    Convert a schemaless row into a column-name to string mapping.

    NULL stays None; bytes are decoded as UTF-8; dates and times use ISO
    format; everything else goes through ``str``.
    """
    converted: Dict[str, Optional[str]] = {}
    for column, value in row.items():
        if value is None:
            converted[column] = None
        elif isinstance(value, (bytes, bytearray, memoryview)):
            converted[column] = bytes(value).decode("utf-8", errors="replace")
        elif isinstance(value, (datetime, date, time)):
            converted[column] = value.isoformat()
        elif isinstance(value, Decimal):
            converted[column] = format(value, "f")
        else:
            converted[column] = str(value)
    return converted


@dataclass(frozen=True)
class LookupRelation:
    """
    Single related row fetched by the primary row's foreign key.

    Attributes:
        name: Include name and attribute name of the relation
        key: Primary-row attribute holding the foreign key
        sql: Lookup template with exactly one ``?`` (the key)
        positive_only: Skip keys <= 0 (unset ids stored as 0)
    """

    name: str
    key: str
    sql: str
    positive_only: bool = False
    cached = True

    def lookup_key(self, row: Mapping[str, Any]) -> Optional[Hashable]:
        value = row.get(self.key)
        if value is None:
            return None
        if self.positive_only and value <= 0:
            return None
        return value

    async def fetch(self, executor: QueryExecutor, key: Hashable) -> Optional[Record]:
        return await executor.fetch_optional(self.sql, key)


@dataclass(frozen=True)
class CollectionRelation:
    """
    Every related row whose foreign key equals the primary row's ``key``.

    Attributes:
        name: Include name and attribute name of the relation
        key: Primary-row attribute the related rows point at
        sql: Template with exactly one ``?`` (the key)
        aliases: Other include names answering to this relation
    """

    name: str
    key: str
    sql: str
    aliases: Tuple[str, ...] = ()
    cached = False

    def lookup_key(self, row: Mapping[str, Any]) -> Optional[Hashable]:
        return row.get(self.key)

    async def fetch(self, executor: QueryExecutor, key: Hashable) -> List[Record]:
        if key is None:
            return []
        return await executor.fetch_all(self.sql, (), key)


@dataclass(frozen=True)
class CustomRelation:
    """
    Per-deployment custom fields from a ``SELECT *`` side table.

    Attributes:
        key: Primary-row attribute used to find the side-table row
        sql: Template with exactly one ``?`` (the key)
        name: Include name, ``custom`` unless overridden
    """

    key: str
    sql: str
    name: str = "custom"
    cached = False

    def lookup_key(self, row: Mapping[str, Any]) -> Optional[Hashable]:
        return row.get(self.key)

    async def fetch(
        self, executor: QueryExecutor, key: Hashable
    ) -> Optional[Dict[str, Optional[str]]]:
        if key is None:
            return None
        row = await executor.fetch_optional(self.sql, key)
        return row_to_string_map(row) if row is not None else None


Relation = Union[LookupRelation, CollectionRelation, CustomRelation]


def _include_names(relation: Relation) -> Tuple[str, ...]:
    return (relation.name,) + tuple(getattr(relation, "aliases", ()))


class InclusionResolver:
    """
    Per-request relation resolver.

    Args:
        executor: Executor bound to the request's session
        relations: The resource's relation specs
        includes: Requested include names (already lower-cased)

    Example:
        ```python
        resolver = InclusionResolver(executor, BIBLIO_RELATIONS, params.includes())
        for row in rows:
            row.update(await resolver.resolve(row))
        ```
    """

    def __init__(
        self,
        executor: QueryExecutor,
        relations: Sequence[Relation],
        includes: AbstractSet[str],
    ):
        self.executor = executor
        self.relations = [
            relation
            for relation in relations
            if any(name in includes for name in _include_names(relation))
        ]
        self.caches: Dict[str, Dict[Hashable, Any]] = {
            relation.name: {} for relation in self.relations if relation.cached
        }
        self.lookup_count = 0

    async def _resolve_relation(self, relation: Relation, row: Mapping[str, Any]) -> Any:
        key = relation.lookup_key(row)
        if not relation.cached:
            if key is not None:
                self.lookup_count += 1
            return await relation.fetch(self.executor, key)

        if key is None:
            return None
        cache = self.caches[relation.name]
        if key not in cache:
            self.lookup_count += 1
            cache[key] = await relation.fetch(self.executor, key)
        return cache[key]

    async def resolve(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Resolve every requested relation for one primary row.

        Returns:
            Relation name to related record, record list or None
        """
        resolved = {}
        for relation in self.relations:
            resolved[relation.name] = await self._resolve_relation(relation, row)
        return resolved

    async def resolve_many(self, rows: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        """Resolve relations for each row in order."""
        return [await self.resolve(row) for row in rows]
