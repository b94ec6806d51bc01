"""Registry of predefined quick-download reports (descargas rápidas)."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from dotacion.query.exceptions import InvalidParameter, MissingParameter
from dotacion.query.validator import TABLE_COLUMNS, escape_identifier, quote_literal, validate_table

DOTACION_TABLE = "dotacion_gcba_prueba"


class DownloadBlock(str, Enum):
    """Groups shown together on the downloads page."""

    MINISTERIOS = "ministerios"
    MINISTERIOS_MAILS = "ministerios-mails"
    GLOBAL = "global"


class ParamType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    SELECT = "select"  # Options come from options_endpoint


@dataclass(frozen=True)
class ReportParam:
    name: str
    label: str
    type: ParamType = ParamType.STRING
    options_endpoint: Optional[str] = None
    required: bool = False
    default: Any = None


@dataclass(frozen=True)
class ReportTemplate:
    """
    A predefined report.

    ``build_sql`` receives already resolved parameters (numbers as ``int``) and
    the effective DISTINCT flag, and returns a complete parameterless SELECT.
    """

    slug: str
    block: DownloadBlock
    name: str
    description: str
    build_sql: Callable[[Dict[str, Any], bool], str]
    params: Tuple[ReportParam, ...] = ()
    allow_distinct: bool = True
    default_distinct: bool = True
    distinct_columns: Tuple[str, ...] = ()
    table: str = DOTACION_TABLE


class ReportRegistry:
    """Registry of all predefined reports, in registration order."""

    def __init__(self):
        self._templates: Dict[str, ReportTemplate] = {}

    def register(self, template: ReportTemplate) -> None:
        """Register a report after checking it against the table whitelists."""
        validate_table(template.table)

        if template.slug in self._templates:
            raise ValueError(f"Report already registered: {template.slug}")

        known_columns = TABLE_COLUMNS.get(template.table, ())
        unknown = [col for col in template.distinct_columns if col not in known_columns]
        if unknown:
            raise ValueError(f"Unknown distinct columns for {template.slug}: {', '.join(unknown)}")

        self._templates[template.slug] = template

    def get(self, slug: str) -> Optional[ReportTemplate]:
        return self._templates.get(slug)

    def all(self) -> List[ReportTemplate]:
        return list(self._templates.values())

    def by_block(self, block: str) -> List[ReportTemplate]:
        return [t for t in self._templates.values() if t.block == block]

    def blocks(self) -> List[DownloadBlock]:
        """Blocks in order of first appearance."""
        seen: List[DownloadBlock] = []
        for template in self._templates.values():
            if template.block not in seen:
                seen.append(template.block)
        return seen


# ===== PARAMETER RESOLUTION =====


def resolve_params(template: ReportTemplate, query_params: Mapping[str, str]) -> Dict[str, Any]:
    """
    Collect the template's declared parameters from the query string.

    Empty values count as absent and fall back to the declared default.
    Undeclared keys are ignored.
    """
    resolved: Dict[str, Any] = {}
    for param in template.params:
        raw = query_params.get(param.name)
        value: Any = None

        if raw is not None and raw.strip() != "":
            if param.type == ParamType.NUMBER:
                try:
                    value = int(raw.strip())
                except ValueError:
                    raise InvalidParameter(f"Parámetro inválido: {param.label} debe ser un número entero") from None
            else:
                value = raw
        elif param.default is not None:
            value = param.default

        if value is None:
            if param.required:
                raise MissingParameter(f"Parámetro requerido faltante: {param.label}")
            continue

        resolved[param.name] = value
    return resolved


def resolve_distinct(template: ReportTemplate, requested: Optional[bool]) -> bool:
    """The caller's flag only counts when the report lets users toggle DISTINCT."""
    if not template.allow_distinct or requested is None:
        return template.default_distinct
    return requested


# ===== SQL HELPERS =====


def _select(columns: Tuple[str, ...], distinct: bool) -> str:
    column_sql = ", ".join(escape_identifier(col) for col in columns) if columns else "*"
    return f"SELECT DISTINCT {column_sql}" if distinct else f"SELECT {column_sql}"


def _not_empty(column: str) -> str:
    col = escape_identifier(column)
    return f"{col} IS NOT NULL AND {col} <> ''"


def _report_sql(columns: Tuple[str, ...], distinct: bool, conditions: List[str]) -> str:
    sql = f"{_select(columns, distinct)} FROM {escape_identifier(DOTACION_TABLE)}"
    if conditions:
        sql += " WHERE " + " AND ".join(conditions)
    return sql


def _ministry_equals(params: Dict[str, Any]) -> str:
    return f"{escape_identifier('MINISTERIO')} = {quote_literal(params.get('ministerio', ''))}"


MINISTERIO_PARAM = ReportParam(
    name="ministerio",
    label="Ministerio",
    type=ParamType.SELECT,
    options_endpoint="/api/meta/ministerios",
    required=True,
)

WORK_MAIL_COLUMNS = ("MINISTERIO", "AYN", "MAIL_LABORAL")
PERSONAL_MAIL_COLUMNS = ("MINISTERIO", "AYN", "MAIL_PERSONAL")
UNIQUE_PERSON_COLUMNS = ("CUIL_SIN_GUIONES", "CUIL", "AYN", "MINISTERIO", "MAIL_LABORAL", "MAIL_PERSONAL")


def _members_by_ministry(params: Dict[str, Any], distinct: bool) -> str:
    return _report_sql((), distinct, [_ministry_equals(params)])


def _members_all_ministries(params: Dict[str, Any], distinct: bool) -> str:
    return _report_sql((), distinct, [_not_empty("MINISTERIO")])


def _work_mails_by_ministry(params: Dict[str, Any], distinct: bool) -> str:
    return _report_sql(WORK_MAIL_COLUMNS, distinct, [_ministry_equals(params), _not_empty("MAIL_LABORAL")])


def _personal_mails_by_ministry(params: Dict[str, Any], distinct: bool) -> str:
    return _report_sql(
        PERSONAL_MAIL_COLUMNS, distinct, [_ministry_equals(params), _not_empty("MAIL_PERSONAL")]
    )


def _all_work_mails(params: Dict[str, Any], distinct: bool) -> str:
    return _report_sql(WORK_MAIL_COLUMNS, distinct, [_not_empty("MAIL_LABORAL")])


def _all_personal_mails(params: Dict[str, Any], distinct: bool) -> str:
    return _report_sql(PERSONAL_MAIL_COLUMNS, distinct, [_not_empty("MAIL_PERSONAL")])


def _unique_people(params: Dict[str, Any], distinct: bool) -> str:
    # Always DISTINCT, whatever the caller asked for
    return _report_sql(UNIQUE_PERSON_COLUMNS, True, [_not_empty("CUIL_SIN_GUIONES")])


def _members_by_age(params: Dict[str, Any], distinct: bool) -> str:
    edad_min = int(params.get("edad_min", 10))
    edad_max = int(params.get("edad_max", 24))
    age = f"TIMESTAMPDIFF(YEAR, {escape_identifier('FEC_NACIM')}, CURDATE())"
    return _report_sql((), distinct, [f"{age} BETWEEN {edad_min} AND {edad_max}"])


# ===== REGISTERED REPORTS =====

registry = ReportRegistry()

registry.register(
    ReportTemplate(
        slug="integrantes-por-ministerio",
        block=DownloadBlock.MINISTERIOS,
        name="Integrantes por Ministerio",
        description="Descarga todos los integrantes de un ministerio específico",
        params=(MINISTERIO_PARAM,),
        distinct_columns=("CUIL_SIN_GUIONES", "AYN", "MINISTERIO"),
        build_sql=_members_by_ministry,
    )
)

registry.register(
    ReportTemplate(
        slug="integrantes-todos-los-ministerios",
        block=DownloadBlock.MINISTERIOS,
        name="Todos los Integrantes de Todos los Ministerios",
        description="Descarga todos los integrantes de todos los ministerios",
        distinct_columns=("CUIL_SIN_GUIONES", "AYN", "MINISTERIO"),
        build_sql=_members_all_ministries,
    )
)

registry.register(
    ReportTemplate(
        slug="mails-laborales-por-ministerio",
        block=DownloadBlock.MINISTERIOS_MAILS,
        name="Mails Laborales por Ministerio",
        description="Listado de mails laborales de un ministerio específico",
        params=(MINISTERIO_PARAM,),
        distinct_columns=("MAIL_LABORAL",),
        build_sql=_work_mails_by_ministry,
    )
)

registry.register(
    ReportTemplate(
        slug="mails-personales-por-ministerio",
        block=DownloadBlock.MINISTERIOS_MAILS,
        name="Mails Personales por Ministerio",
        description="Listado de mails personales de un ministerio específico",
        params=(MINISTERIO_PARAM,),
        distinct_columns=("MAIL_PERSONAL",),
        build_sql=_personal_mails_by_ministry,
    )
)

registry.register(
    ReportTemplate(
        slug="mails-laborales-todos",
        block=DownloadBlock.MINISTERIOS_MAILS,
        name="Todos los Mails Laborales",
        description="Listado global de todos los mails laborales",
        distinct_columns=("MAIL_LABORAL",),
        build_sql=_all_work_mails,
    )
)

registry.register(
    ReportTemplate(
        slug="mails-personales-todos",
        block=DownloadBlock.MINISTERIOS_MAILS,
        name="Todos los Mails Personales",
        description="Listado global de todos los mails personales",
        distinct_columns=("MAIL_PERSONAL",),
        build_sql=_all_personal_mails,
    )
)

registry.register(
    ReportTemplate(
        slug="personas-unicas-por-cuil",
        block=DownloadBlock.GLOBAL,
        name="Personas Únicas por CUIL",
        description="Listado maestro de personas únicas identificadas por CUIL",
        allow_distinct=False,
        distinct_columns=("CUIL_SIN_GUIONES",),
        build_sql=_unique_people,
    )
)

registry.register(
    ReportTemplate(
        slug="integrantes-por-edad-global",
        block=DownloadBlock.GLOBAL,
        name="Integrantes por Rango de Edad",
        description="Personas dentro de un rango de edad específico",
        params=(
            ReportParam(name="edad_min", label="Edad Mínima", type=ParamType.NUMBER, required=True, default=10),
            ReportParam(name="edad_max", label="Edad Máxima", type=ParamType.NUMBER, required=True, default=24),
        ),
        distinct_columns=("CUIL_SIN_GUIONES",),
        build_sql=_members_by_age,
    )
)
