"""
Statement compilation and execution.

SQL templates use ``?`` placeholders. ``compile_statement`` turns a template
into a SQLAlchemy ``text()`` construct whose placeholders become named,
typed bind parameters: first the filter clause values in clause order, then
any trailing parameters (limit/offset, lookup keys). Count and data queries
built from the same clause list therefore bind the same values in the same
order.

Features:
- Type-directed binds (String, BigInteger, Boolean); values reach the driver
  in native form, never pre-stringified
- Rows returned as plain dicts
- Storage failures surfaced as ``DBError`` with a generic message; constraint
  violations on writes as ``ConflictError``

Limitations:
- Templates must not contain a literal ``?`` outside placeholders
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import bindparam, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import TextClause
from sqlalchemy.types import BigInteger, Boolean, String, TypeEngine

from bibliocore.api.filtering import FilterClause
from bibliocore.api.pagination import Pagination
from bibliocore.errors.exceptions import ConflictError, DBError, NotFoundError
from bibliocore.logging import ensure_logger

PLACEHOLDER = "?"


def sql_type_for(value: Any) -> Optional[TypeEngine]:
    """
    SQLAlchemy type for a plain Python bind value.

    Returns None for types SQLAlchemy should infer itself (dates and the like).
    """
    # bool is a subclass of int
    if isinstance(value, bool):
        return Boolean()
    if isinstance(value, int):
        return BigInteger()
    if isinstance(value, str):
        return String()
    return None


def compile_statement(
    sql: str, clauses: Sequence[FilterClause] = (), *params: Any
) -> TextClause:
    """
    Compile a ``?`` template into a typed SQLAlchemy text statement.

    Args:
        sql: SQL template with ``?`` placeholders
        clauses: Filter clauses bound to the first placeholders, in order
        *params: Values bound to the remaining placeholders, in order

    Returns:
        TextClause with bind parameters ``p0, p1, ...``

    Raises:
        ValueError: If the number of placeholders and values differ
    """
    values: List[Tuple[Any, Optional[TypeEngine]]] = [
        (clause.value.value, clause.value.sql_type) for clause in clauses
    ]
    values.extend((param, sql_type_for(param)) for param in params)

    pieces = sql.split(PLACEHOLDER)
    if len(pieces) - 1 != len(values):
        raise ValueError(
            f"Statement has {len(pieces) - 1} placeholders but {len(values)} values"
        )

    parts = [pieces[0]]
    binds = []
    for index, ((value, type_), piece) in enumerate(zip(values, pieces[1:])):
        name = f"p{index}"
        parts.append(f":{name}")
        parts.append(piece)
        binds.append(bindparam(name, value, type_=type_))

    statement = text("".join(parts))
    if binds:
        statement = statement.bindparams(*binds)
    return statement


class QueryExecutor:
    """
    Runs compiled statements on one request's session.

    Attributes:
        session: Request-scoped AsyncSession
        logger: Logger used for storage failures
    """

    def __init__(self, session: AsyncSession, logger: Optional[logging.Logger] = None):
        self.session = session
        self.logger = ensure_logger(logger, __name__)

    async def _execute(self, statement: TextClause):
        try:
            return await self.session.execute(statement)
        except IntegrityError as e:
            self.logger.warning(f"Write rejected by a constraint: {e}")
            raise ConflictError(message="write conflicts with existing data") from e
        except SQLAlchemyError as e:
            self.logger.error(f"Query failed: {e}")
            raise DBError() from e

    async def execute(self, sql: str, *params: Any):
        """
        Run a write statement.

        Returns:
            The driver result; ``rowcount`` holds the rows matched and
            ``lastrowid`` the generated key of an INSERT

        Raises:
            ConflictError: If the write violates a key or constraint
            DBError: For any other storage failure
        """
        return await self._execute(compile_statement(sql, (), *params))

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except IntegrityError as e:
            self.logger.warning(f"Commit rejected by a constraint: {e}")
            raise ConflictError(message="write conflicts with existing data") from e
        except SQLAlchemyError as e:
            self.logger.error(f"Commit failed: {e}")
            raise DBError() from e

    async def scalar(
        self, sql: str, clauses: Sequence[FilterClause] = (), *params: Any
    ) -> Any:
        """Run a single-value query, e.g. ``SELECT COUNT(*)``."""
        result = await self._execute(compile_statement(sql, clauses, *params))
        return result.scalar()

    async def fetch_all(
        self, sql: str, clauses: Sequence[FilterClause] = (), *params: Any
    ) -> List[Dict[str, Any]]:
        result = await self._execute(compile_statement(sql, clauses, *params))
        return [dict(row) for row in result.mappings().all()]

    async def fetch_optional(self, sql: str, *params: Any) -> Optional[Dict[str, Any]]:
        """Fetch the first matching row, or None."""
        result = await self._execute(compile_statement(sql, (), *params))
        row = result.mappings().first()
        return dict(row) if row is not None else None

    async def fetch_one(
        self, sql: str, *params: Any, resource_type: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Fetch exactly one row.

        Raises:
            NotFoundError: If no row matches
        """
        row = await self.fetch_optional(sql, *params)
        if row is None:
            if resource_type and params:
                raise NotFoundError(resource_type=resource_type, resource_id=params[0])
            raise NotFoundError()
        return row

    async def fetch_page(
        self,
        count_sql: str,
        data_sql: str,
        clauses: Sequence[FilterClause],
        pagination: Pagination,
    ) -> Tuple[int, List[Dict[str, Any]]]:
        """
        Run the count query and the page query of a list request.

        Both queries bind ``clauses`` identically; the data query additionally
        binds limit and offset after them and must end with ``LIMIT ? OFFSET ?``.

        Args:
            count_sql: ``SELECT COUNT(*)`` template including the WHERE clause
            data_sql: Row template including WHERE, ORDER BY and LIMIT/OFFSET
            clauses: Compiled filter clauses
            pagination: Requested page

        Returns:
            ``(total, rows)``
        """
        limit, offset, _, _ = pagination.limit_offset()
        total = await self.scalar(count_sql, clauses)
        rows = await self.fetch_all(data_sql, clauses, limit, offset)
        return int(total or 0), rows
