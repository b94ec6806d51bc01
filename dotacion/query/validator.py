"""
Identifier and value validation for generated SQL.

Identifiers cannot be bound as parameters, so every table and column name that
reaches SQL text goes through the whitelists and the identifier pattern here,
and is then quoted with escape_identifier.
"""

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Tuple

from .exceptions import ColumnNotAllowed, InvalidColumnName, TableNotAllowed

ALLOWED_TABLES: Tuple[str, ...] = ("dotacion_gcba_prueba", "padron")

DOTACION_COLUMNS: Tuple[str, ...] = (
    "id_dotacion",
    "MINISTERIO",
    "CUIL",
    "AYN",
    "FEC_NACIM",
    "SEXO",
    "TIP_DOC",
    "NUM_DOC",
    "INGRESO",
    "ROL",
    "LIT_PUESTO",
    "REGIMEN",
    "SIGLA",
    "COD_REP",
    "DESC_REP",
    "PATH_NOMBRES",
    "DOMICILIO_LABORAL",
    "LIT_AGRUPAMIENTO",
    "MAIL_LABORAL",
    "MAIL_PERSONAL",
    "MAIL_MIA",
    "DOMICILIO_PERSONAL",
    "CP",
    "DISCAP",
    "CUIL_SIN_GUIONES",
)

# Tables without an entry here are only pattern-checked; their columns come
# from schema introspection.
TABLE_COLUMNS: Dict[str, Tuple[str, ...]] = {
    "dotacion_gcba_prueba": DOTACION_COLUMNS,
}

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9_\-]+$")


def validate_table(table_name: str) -> None:
    """Raise TableNotAllowed unless the table is whitelisted."""
    if table_name not in ALLOWED_TABLES:
        raise TableNotAllowed(f"Tabla no permitida: {table_name}")


def is_valid_identifier(name: Any) -> bool:
    return isinstance(name, str) and IDENTIFIER_PATTERN.fullmatch(name) is not None


def validate_column(table_name: str, column_name: str) -> None:
    """
    Validate a column reference.

    The table must be whitelisted and the column name must match the identifier
    pattern. When the table has a static column list the column must also be in it.
    """
    validate_table(table_name)

    if not is_valid_identifier(column_name):
        raise InvalidColumnName(f"Nombre de columna inválido: {column_name}")

    allowed_columns = TABLE_COLUMNS.get(table_name)
    if allowed_columns and column_name not in allowed_columns:
        raise ColumnNotAllowed(f"Columna no permitida: {column_name} en tabla {table_name}")


def escape_identifier(name: str) -> str:
    """Quote an identifier with backticks, doubling embedded backticks."""
    return "`" + name.replace("`", "``") + "`"


def quote_literal(value: Any) -> str:
    """
    Render a value as a SQL literal.

    Only for SQL that is built as text (report templates, display SQL). Quotes
    and backslashes are doubled so the literal cannot terminate early under
    MySQL's default escaping rules.
    """
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, datetime):
        text = value.strftime("%Y-%m-%d %H:%M:%S")
    elif isinstance(value, date):
        text = value.isoformat()
    else:
        text = str(value)
    return "'" + text.replace("\\", "\\\\").replace("'", "''") + "'"
