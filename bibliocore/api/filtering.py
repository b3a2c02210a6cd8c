"""
Filtering utilities for list endpoints.

This module lowers ``filter[<name>]=<value>`` query parameters to SQL
``WHERE`` fragments with typed bind values.

Features:
- Per-resource allow-lists mapping public filter names to SQL columns
- ``=`` and ``LIKE`` comparisons
- Value coercion to text, 64-bit integer or boolean before binding
- Deterministic clause order, so count and data queries bind identically

Limitations:
- One value per filter; comma-separated value lists are rejected
- Filters are always ANDed together; only a search group is ORed
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Optional, Sequence, Union

from sqlalchemy.types import BigInteger, Boolean, String, TypeEngine

from bibliocore.errors.exceptions import (
    InvalidFilterValueError,
    MultipleFilterValuesError,
    UnsupportedFilterError,
)

logger = logging.getLogger(__name__)

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_TRUE_LITERALS = ("true", "1")
_FALSE_LITERALS = ("false", "0")


class FilterOperator(str, Enum):
    """
    Comparison applied by a filter.

    Attributes:
        EQUALS: ``<column> = ?`` with the value coerced by type
        LIKE: ``<column> LIKE ?`` with the value wrapped in ``%...%``
    """

    EQUALS = "equals"
    LIKE = "like"


class FilterValueType(str, Enum):
    """Declared type a filter value is coerced to."""

    TEXT = "text"
    INTEGER = "integer"
    BOOLEAN = "boolean"


_SQL_TYPES = {
    FilterValueType.TEXT: String,
    FilterValueType.INTEGER: BigInteger,
    FilterValueType.BOOLEAN: Boolean,
}


@dataclass(frozen=True)
class FilterField:
    """
    Allow-list entry for a filter.

    Attributes:
        name: Public filter name (``filter[<name>]``)
        column: Qualified SQL column the filter applies to
        operator: Comparison operator
        value_type: Type the raw value is coerced to (EQUALS only)
    """

    name: str
    column: str
    operator: FilterOperator = FilterOperator.EQUALS
    value_type: FilterValueType = FilterValueType.TEXT

    def to_clause(self, raw_value: str, parameter: Optional[str] = None) -> "FilterClause":
        """
        Build the clause for one raw value.

        ``parameter`` names the request field the value came from in errors;
        it defaults to ``filter[<name>]``.

        Raises:
            InvalidFilterValueError: If the value does not coerce to value_type
        """
        if self.operator is FilterOperator.LIKE:
            return FilterClause(
                f"{self.column} LIKE ?", FilterValue.text(f"%{raw_value}%")
            )
        return FilterClause(f"{self.column} = ?", self.parse_value(raw_value, parameter))

    def parse_value(self, raw_value: str, parameter: Optional[str] = None) -> "FilterValue":
        if self.value_type is FilterValueType.INTEGER:
            if _INTEGER_RE.fullmatch(raw_value):
                number = int(raw_value)
                if INT64_MIN <= number <= INT64_MAX:
                    return FilterValue.integer(number)
            raise InvalidFilterValueError(self.name, "an integer", parameter)

        if self.value_type is FilterValueType.BOOLEAN:
            if raw_value in _TRUE_LITERALS:
                return FilterValue.boolean(True)
            if raw_value in _FALSE_LITERALS:
                return FilterValue.boolean(False)
            raise InvalidFilterValueError(self.name, "boolean", parameter)

        return FilterValue.text(raw_value)


@dataclass(frozen=True)
class FilterValue:
    """
    A coerced filter value tagged with its type.

    Attributes:
        kind: Value type tag
        value: The Python value handed to the driver
    """

    kind: FilterValueType
    value: Union[str, int, bool]

    @classmethod
    def text(cls, value: str) -> "FilterValue":
        return cls(FilterValueType.TEXT, value)

    @classmethod
    def integer(cls, value: int) -> "FilterValue":
        return cls(FilterValueType.INTEGER, value)

    @classmethod
    def boolean(cls, value: bool) -> "FilterValue":
        return cls(FilterValueType.BOOLEAN, value)

    @property
    def sql_type(self) -> TypeEngine:
        """SQLAlchemy type the value is bound with."""
        return _SQL_TYPES[self.kind]()


@dataclass(frozen=True)
class FilterClause:
    """
    One compiled filter.

    Attributes:
        statement: SQL fragment with a single ``?`` placeholder
        value: Value bound to that placeholder
    """

    statement: str
    value: FilterValue


def filter_clauses(
    filters: Mapping[str, Sequence[str]], allowed: Sequence[FilterField]
) -> List[FilterClause]:
    """
    Validate parsed filters against an allow-list and compile them.

    Every supplied filter is validated before any clause is returned. Clauses
    come out in the allow-list's declared order, independent of the order the
    client sent them in.

    Args:
        filters: Filter name to raw values, as parsed from the query string
        allowed: The resource's filter allow-list

    Returns:
        Compiled clauses, one per supplied filter

    Raises:
        UnsupportedFilterError: If a name is not in the allow-list
        MultipleFilterValuesError: If a filter carries more than one value
        InvalidFilterValueError: If a value does not coerce to the field type
    """
    fields = {entry.name: entry for entry in allowed}
    compiled = {}
    for name, values in filters.items():
        if not values:
            continue
        field = fields.get(name)
        if field is None:
            logger.debug(f"Rejected unsupported filter {name!r}")
            raise UnsupportedFilterError(name)
        if len(values) > 1:
            logger.debug(f"Rejected multi-value filter {name!r}")
            raise MultipleFilterValuesError(name)
        compiled[name] = field.to_clause(values[0])

    return [compiled[entry.name] for entry in allowed if entry.name in compiled]


def where_clause(
    clauses: Sequence[FilterClause], any_of: Sequence[FilterClause] = ()
) -> str:
    """
    Join clause statements into a WHERE clause.

    Args:
        clauses: Clauses that must all match
        any_of: Optional group of which at least one must match; it comes
            first, so its values bind before those of ``clauses``

    Returns:
        ``""`` when there are no clauses, else e.g.
        ``"WHERE (x OR y) AND a AND b"``
    """
    parts = []
    if any_of:
        parts.append("(" + " OR ".join(clause.statement for clause in any_of) + ")")
    parts.extend(clause.statement for clause in clauses)
    if not parts:
        return ""
    return "WHERE " + " AND ".join(parts)
