"""
Schema introspection for tables that have no static column list.
"""

from typing import List, Tuple, Union

from sqlalchemy import inspect
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

from .exceptions import DatabaseError

NUMBER_TYPE_MARKERS = ("int", "decimal", "float", "double", "numeric")
DATE_TYPE_MARKERS = ("date", "time")


def map_data_type(db_type: str) -> str:
    """Map a database type name to one of 'number', 'date' or 'string'."""
    normalized = str(db_type).lower()
    if any(marker in normalized for marker in NUMBER_TYPE_MARKERS):
        return "number"
    if any(marker in normalized for marker in DATE_TYPE_MARKERS):
        return "date"
    return "string"


class SchemaIntrospector:
    """Reads table and column names from the live database."""

    def __init__(self, bind: Union[Engine, Connection]):
        self.bind = bind

    def list_columns(self, table_name: str) -> List[Tuple[str, str]]:
        """Return (column name, database type) pairs in ordinal order."""
        try:
            columns = inspect(self.bind).get_columns(table_name)
        except NoSuchTableError:
            return []
        except SQLAlchemyError as e:
            raise DatabaseError("Error al obtener las columnas de la base de datos", original=e) from e
        return [(col["name"], str(col["type"])) for col in columns]

    def list_tables(self) -> List[str]:
        try:
            return sorted(inspect(self.bind).get_table_names())
        except SQLAlchemyError as e:
            raise DatabaseError("Error al obtener las tablas de la base de datos", original=e) from e
