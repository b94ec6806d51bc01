"""
Query module for the dotación roster.

Main Components:
- QueryBuilder: turns a visual-builder QueryStructure into parameterized SQL
- QueryGateway: read-only execution with a global row cap
- Validator: table/column whitelists and identifier quoting
- Schemas: the query description sent by the builder UI
"""

from .builder import QueryBuilder, build_sql_from_query
from .engine import QueryGateway, render_sql
from .schemas import BuiltQuery, ColumnRef, Condition, OrderBy, QueryStructure, TableRef
from .validator import ALLOWED_TABLES, TABLE_COLUMNS, escape_identifier, quote_literal

__all__ = [
    # Main classes
    "QueryBuilder",
    "QueryGateway",
    "build_sql_from_query",
    "render_sql",
    # Query description types
    "QueryStructure",
    "TableRef",
    "ColumnRef",
    "Condition",
    "OrderBy",
    "BuiltQuery",
    # Whitelists and quoting
    "ALLOWED_TABLES",
    "TABLE_COLUMNS",
    "escape_identifier",
    "quote_literal",
]
