"""Table and column metadata for the visual query builder."""

from typing import Dict, List, Optional

from .introspection import SchemaIntrospector, map_data_type
from .exceptions import InvalidIdentifier
from .validator import ALLOWED_TABLES, is_valid_identifier


class ColumnMeta:
    """A column offered to the builder UI."""

    def __init__(self, name: str, data_type: str, label: Optional[str] = None):
        self.name = name
        self.data_type = data_type  # string, number, date
        self.label = label or name

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "type": self.data_type, "label": self.label}


TABLES: List[Dict[str, str]] = [
    {
        "name": "dotacion_gcba_prueba",
        "label": "Dotación GCBA (Prueba)",
        "description": "Tabla principal de dotación del GCBA",
    },
    {
        "name": "padron",
        "label": "Padrón",
        "description": "Tabla de padrón",
    },
]

DOTACION_COLUMN_META: List[ColumnMeta] = [
    ColumnMeta("id_dotacion", "number", "ID Dotación"),
    ColumnMeta("MINISTERIO", "string", "Ministerio"),
    ColumnMeta("CUIL", "string", "CUIL"),
    ColumnMeta("AYN", "string", "Apellido y Nombre"),
    ColumnMeta("FEC_NACIM", "date", "Fecha de Nacimiento"),
    ColumnMeta("SEXO", "string", "Sexo"),
    ColumnMeta("TIP_DOC", "string", "Tipo de Documento"),
    ColumnMeta("NUM_DOC", "string", "Número de Documento"),
    ColumnMeta("INGRESO", "date", "Fecha de Ingreso"),
    ColumnMeta("ROL", "number", "Rol"),
    ColumnMeta("LIT_PUESTO", "string", "Literal Puesto"),
    ColumnMeta("REGIMEN", "string", "Régimen"),
    ColumnMeta("SIGLA", "string", "Sigla"),
    ColumnMeta("COD_REP", "string", "Código REP"),
    ColumnMeta("DESC_REP", "string", "Descripción REP"),
    ColumnMeta("PATH_NOMBRES", "string", "Path Nombres"),
    ColumnMeta("DOMICILIO_LABORAL", "string", "Domicilio Laboral"),
    ColumnMeta("LIT_AGRUPAMIENTO", "string", "Literal Agrupamiento"),
    ColumnMeta("MAIL_LABORAL", "string", "Mail Laboral"),
    ColumnMeta("MAIL_PERSONAL", "string", "Mail Personal"),
    ColumnMeta("MAIL_MIA", "string", "Mail MIA"),
    ColumnMeta("DOMICILIO_PERSONAL", "string", "Domicilio Personal"),
    ColumnMeta("CP", "string", "Código Postal"),
    ColumnMeta("DISCAP", "string", "Discapacidad"),
    ColumnMeta("CUIL_SIN_GUIONES", "string", "CUIL Sin Guiones"),
]

STATIC_COLUMN_META: Dict[str, List[ColumnMeta]] = {
    "dotacion_gcba_prueba": DOTACION_COLUMN_META,
}


def get_tables() -> List[Dict[str, str]]:
    return [dict(table) for table in TABLES if table["name"] in ALLOWED_TABLES]


def is_valid_table(table_name: str) -> bool:
    return table_name in ALLOWED_TABLES


def get_static_columns(table_name: str) -> List[ColumnMeta]:
    return list(STATIC_COLUMN_META.get(table_name, []))


def get_columns(table_name: str, introspector: Optional[SchemaIntrospector] = None) -> List[ColumnMeta]:
    """
    Columns for a whitelisted table.

    Static metadata wins; tables without it fall back to schema introspection.
    Returns an empty list when neither source knows the table.
    """
    columns = get_static_columns(table_name)
    if columns or introspector is None:
        return columns

    if not is_valid_identifier(table_name):
        raise InvalidIdentifier(f"Nombre de tabla inválido: {table_name}")

    return [
        ColumnMeta(name, map_data_type(db_type))
        for name, db_type in introspector.list_columns(table_name)
    ]
