"""Service layer for the visual query builder and table metadata."""

import logging
from typing import Any, Dict, List, Optional

from dotacion.export.serializers import ExportFile, build_export_file, get_media_type, to_flat_records
from dotacion.query.builder import QueryBuilder
from dotacion.query.engine import QueryGateway, render_sql
from dotacion.query.introspection import SchemaIntrospector
from dotacion.query.meta import ColumnMeta, get_columns, get_tables
from dotacion.query.schemas import QueryExecutionResponse, QueryStructure
from dotacion.query.validator import escape_identifier

logger = logging.getLogger(__name__)

EXPORT_BASE_NAME = "consulta"
EXPORT_SHEET_NAME = "Consulta"


class QueryService:
    """Builds, runs and exports visual-builder queries."""

    def __init__(self, gateway: QueryGateway, builder: Optional[QueryBuilder] = None):
        self.gateway = gateway
        self.builder = builder or QueryBuilder(max_limit=gateway.max_rows)

    def execute(self, query: QueryStructure) -> QueryExecutionResponse:
        sql, params = self.builder.build(query)
        rows = to_flat_records(self.gateway.execute(sql, params))
        return QueryExecutionResponse(sql=render_sql(sql, params), rows=rows, row_count=len(rows))

    def export(self, query: QueryStructure, export_format: str = "csv") -> ExportFile:
        get_media_type(export_format)
        sql, params = self.builder.build(query)
        records = to_flat_records(self.gateway.execute(sql, params))
        logger.info("Exporting %d rows as %s", len(records), export_format)
        headers = [col.column for col in query.select]
        return build_export_file(
            records, export_format, EXPORT_BASE_NAME, sheet_name=EXPORT_SHEET_NAME, headers=headers
        )


class MetaService:
    """Table, column and ministry metadata for the builder and downloads pages."""

    def __init__(self, gateway: QueryGateway, introspector: SchemaIntrospector):
        self.gateway = gateway
        self.introspector = introspector

    def get_tables(self) -> List[Dict[str, str]]:
        return get_tables()

    def get_columns(self, table_name: str) -> List[ColumnMeta]:
        columns = get_columns(table_name, self.introspector)
        if not columns:
            logger.warning("No columns found for table: %s", table_name)
        return columns

    def get_ministries(self) -> List[str]:
        """Distinct non-empty ministries, sorted."""
        column = escape_identifier("MINISTERIO")
        sql = (
            f"SELECT DISTINCT {column} FROM {escape_identifier('dotacion_gcba_prueba')} "
            f"WHERE {column} IS NOT NULL AND {column} <> '' ORDER BY {column}"
        )
        return [row["MINISTERIO"] for row in self.gateway.execute(sql) if row["MINISTERIO"]]

    def get_available_tables(self) -> Dict[str, Any]:
        """Every physical table in the roster database, for diagnostics."""
        tables = [{"name": name, "label": name} for name in self.introspector.list_tables()]
        return {"tables": tables, "count": len(tables), "database": "connected"}
