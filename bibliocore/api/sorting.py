"""
Sorting utilities for list endpoints.

Clients send ``sort=-due_date,loan_id``; each resource declares which public
sort keys it accepts and the qualified SQL column each one maps to. Only
allow-listed columns ever reach the ``ORDER BY`` clause.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from bibliocore.errors.exceptions import UnsupportedSortError


@dataclass(frozen=True)
class SortOrder:
    """
    One parsed sort key.

    Attributes:
        field: Public sort key as sent by the client
        ascending: Sort direction
    """

    field: str
    ascending: bool = True

    @property
    def direction(self) -> str:
        return "ASC" if self.ascending else "DESC"


@dataclass(frozen=True)
class SortField:
    """
    Allow-list entry mapping a public sort key to a SQL column.

    Attributes:
        name: Public sort key
        column: Qualified SQL column, e.g. ``member.register_date``
    """

    name: str
    column: str


def parse_sort_string(raw: Optional[str]) -> Tuple[SortOrder, ...]:
    """
    Parse a comma-separated sort string.

    A leading ``-`` means descending; a leading ``+`` or no sign means
    ascending. Segment order is preserved and empty segments are dropped.

    Args:
        raw: Value of the ``sort`` query parameter

    Returns:
        Tuple of SortOrder, primary key first

    Examples:
        >>> parse_sort_string("-due_date,loan_id")
        (SortOrder(field='due_date', ascending=False), SortOrder(field='loan_id', ascending=True))
    """
    if not raw:
        return ()

    orders: List[SortOrder] = []
    for part in raw.split(","):
        segment = part.strip()
        if not segment:
            continue
        if segment.startswith("-"):
            orders.append(SortOrder(segment[1:], ascending=False))
        elif segment.startswith("+"):
            orders.append(SortOrder(segment[1:], ascending=True))
        else:
            orders.append(SortOrder(segment, ascending=True))
    return tuple(orders)


def sort_clause(
    sorts: Sequence[SortOrder], allowed: Sequence[SortField], default: str
) -> str:
    """
    Lower parsed sort keys to an ``ORDER BY`` body.

    Args:
        sorts: Parsed sort keys, in priority order
        allowed: The resource's sort allow-list
        default: ORDER BY body used verbatim when no sort keys were given

    Returns:
        ``"<column> ASC|DESC"`` fragments joined by ``", "``

    Raises:
        UnsupportedSortError: If a key is not in the allow-list
    """
    if not sorts:
        return default

    columns = {entry.name: entry.column for entry in allowed}
    fragments = []
    for order in sorts:
        column = columns.get(order.field)
        if column is None:
            raise UnsupportedSortError(order.field)
        fragments.append(f"{column} {order.direction}")
    return ", ".join(fragments)
