"""
QueryBuilder turns a QueryStructure into parameterized SQL.

This is the single place where builder queries become SQL text. Identifiers are
validated against the whitelists and quoted; every literal value coming from
the caller is emitted as a ``?`` placeholder and returned in the parameter list.
"""

from typing import Any, List

from dotacion.core.config import MAX_ROWS

from .exceptions import (
    EmptySelect,
    InvalidBetween,
    InvalidIdentifier,
    InvalidIn,
    InvalidLimit,
    InvalidOrderDirection,
    InvalidValue,
    MissingTable,
    UnsupportedFeature,
    UnsupportedOperator,
)
from .schemas import (
    COMPARISON_OPERATORS,
    ORDER_DIRECTIONS,
    SCALAR_TYPES,
    BuiltQuery,
    ColumnRef,
    Condition,
    OrderBy,
    QueryStructure,
)
from .validator import escape_identifier, is_valid_identifier, validate_column, validate_table


class QueryBuilder:
    """
    Builds SELECT statements for the visual query builder.

    Clauses are emitted in a fixed order: SELECT, FROM, WHERE, GROUP BY,
    ORDER BY, LIMIT. A requested LIMIT is clamped to ``max_limit``; no LIMIT
    clause is emitted when the query does not ask for one.
    """

    def __init__(self, max_limit: int = MAX_ROWS):
        self.max_limit = max_limit

    def build(self, query: QueryStructure) -> BuiltQuery:
        params: List[Any] = []
        parts: List[str] = []

        if query.from_ is None or not query.from_.name:
            raise MissingTable("Debe especificar una tabla")
        validate_table(query.from_.name)

        if not query.select:
            raise EmptySelect("Debe seleccionar al menos una columna")

        select_columns = ", ".join(self._build_column_ref(col) for col in query.select)
        select_keyword = "SELECT DISTINCT" if query.distinct else "SELECT"
        parts.append(f"{select_keyword} {select_columns}")

        parts.append(f"FROM {self._build_table_ref(query)}")

        if query.joins:
            raise UnsupportedFeature("Los JOINs todavía no están soportados")

        if query.where:
            conditions = [self._build_condition(cond, params) for cond in query.where]
            parts.append("WHERE " + " AND ".join(conditions))

        if query.group_by:
            group_columns = ", ".join(self._build_column_ref(col) for col in query.group_by)
            parts.append(f"GROUP BY {group_columns}")

        if query.order_by:
            order_columns = ", ".join(self._build_order_by(order) for order in query.order_by)
            parts.append(f"ORDER BY {order_columns}")

        if query.limit is not None:
            if query.limit < 0:
                raise InvalidLimit(f"LIMIT debe ser un entero no negativo: {query.limit}")
            parts.append(f"LIMIT {min(query.limit, self.max_limit)}")

        return BuiltQuery(sql=" ".join(parts), params=params)

    def _build_table_ref(self, query: QueryStructure) -> str:
        table_sql = escape_identifier(query.from_.name)
        alias = query.from_.alias
        if alias:
            if not is_valid_identifier(alias):
                raise InvalidIdentifier(f"Alias de tabla inválido: {alias}")
            table_sql += f" AS {escape_identifier(alias)}"
        return table_sql

    def _build_column_ref(self, col: ColumnRef) -> str:
        validate_column(col.table, col.column)
        return f"{escape_identifier(col.table)}.{escape_identifier(col.column)}"

    def _build_order_by(self, order: OrderBy) -> str:
        column_sql = self._build_column_ref(order.column)
        if order.direction not in ORDER_DIRECTIONS:
            raise InvalidOrderDirection(f"Dirección de orden inválida: {order.direction}")
        return f"{column_sql} {order.direction}"

    def _build_condition(self, condition: Condition, params: List[Any]) -> str:
        left = self._build_column_ref(condition.left)
        operator = condition.operator

        if operator in COMPARISON_OPERATORS:
            if condition.right_column is not None:
                return f"{left} {operator} {self._build_column_ref(condition.right_column)}"
            self._bind(params, [condition.right_value])
            return f"{left} {operator} ?"

        if operator == "LIKE":
            # Wildcards are the caller's responsibility
            self._bind(params, [condition.right_value])
            return f"{left} LIKE ?"

        if operator == "BETWEEN":
            values = condition.between_values
            if not values or len(values) != 2:
                raise InvalidBetween("BETWEEN requiere exactamente dos valores")
            self._bind(params, values)
            return f"{left} BETWEEN ? AND ?"

        if operator == "IN":
            values = condition.in_values
            if not values:
                raise InvalidIn("IN requiere al menos un valor")
            self._bind(params, values)
            placeholders = ", ".join("?" for _ in values)
            return f"{left} IN ({placeholders})"

        raise UnsupportedOperator(f"Operador no soportado: {condition.operator}")

    @staticmethod
    def _bind(params: List[Any], values: List[Any]) -> None:
        for value in values:
            if value is not None and not isinstance(value, SCALAR_TYPES):
                raise InvalidValue(f"Valor inválido en la condición: {value!r}")
        params.extend(values)


def build_sql_from_query(query: QueryStructure, max_limit: int = MAX_ROWS) -> BuiltQuery:
    """Build parameterized SQL for a query description."""
    return QueryBuilder(max_limit=max_limit).build(query)
