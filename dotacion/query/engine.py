# dotacion/query/engine.py
"""Read-only execution gateway for generated SQL."""

import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

import sqlparse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dotacion.core.config import MAX_ROWS

from .exceptions import DatabaseError, ReadOnlyViolation
from .validator import quote_literal

logger = logging.getLogger(__name__)

PLACEHOLDER = re.compile(r"\?")


def ensure_read_only(sql: str) -> None:
    """Reject anything that is not exactly one SELECT statement."""
    statements = [stmt for stmt in sqlparse.parse(sql) if stmt.token_first(skip_cm=True) is not None]
    if len(statements) != 1:
        raise ReadOnlyViolation("Solo se permite una única sentencia SQL")
    if statements[0].get_type() != "SELECT":
        raise ReadOnlyViolation("Solo se permiten consultas SELECT")


def bind_positional(sql: str, params: Sequence[Any]) -> Tuple[str, Dict[str, Any]]:
    """Rewrite ``?`` placeholders as named bind parameters ``:p0``, ``:p1``, ..."""
    placeholder_count = len(PLACEHOLDER.findall(sql))
    if placeholder_count != len(params):
        raise ValueError(
            f"Statement has {placeholder_count} placeholders but {len(params)} parameters were given"
        )

    counter = iter(range(placeholder_count))
    named_sql = PLACEHOLDER.sub(lambda _: f":p{next(counter)}", sql)
    return named_sql, {f"p{i}": value for i, value in enumerate(params)}


def render_sql(sql: str, params: Optional[Sequence[Any]] = None) -> str:
    """
    Inline parameter values for display.

    The result is shown to the user next to the query results; it is never
    executed.
    """
    if not params:
        return sql
    values = iter(params)
    return PLACEHOLDER.sub(lambda _: quote_literal(next(values)), sql)


class QueryGateway:
    """Executes validated, single-statement SELECTs against the roster database."""

    def __init__(self, session: Session, max_rows: int = MAX_ROWS, log_queries: bool = False):
        self.session = session
        self.max_rows = max(1, min(max_rows, MAX_ROWS))
        self.log_queries = log_queries

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """Run a SELECT and return at most ``max_rows`` rows as dictionaries."""
        ensure_read_only(sql)
        params = list(params or [])

        if self.log_queries:
            logger.info("Executing SQL: %s | params=%r", sql, params)

        try:
            if params:
                named_sql, binds = bind_positional(sql, params)
                result = self.session.execute(text(named_sql), binds)
            else:
                # Template SQL may contain literal '%' or ':' characters
                result = self.session.connection().exec_driver_sql(
                    sql, execution_options={"no_parameters": True}
                )
            rows = result.mappings().fetchmany(self.max_rows)
        except SQLAlchemyError as e:
            logger.error("Query execution failed: %s", e)
            raise DatabaseError("Error al ejecutar la consulta. Por favor, verifique los datos.", original=e) from e

        if self.log_queries:
            logger.info("Query returned %d rows", len(rows))

        return [dict(row) for row in rows]

    def ping(self) -> None:
        """Run a trivial query to check connectivity."""
        self.execute("SELECT 1 AS test")
