"""Service layer for predefined report downloads."""

import logging
from typing import Mapping, Optional

from dotacion.downloads.registry import (
    ReportRegistry,
    ReportTemplate,
    resolve_distinct,
    resolve_params,
)
from dotacion.downloads.schemas import DownloadBlockRead, DownloadCatalog, ReportParamRead, ReportRead
from dotacion.export.serializers import ExportFile, build_export_file, get_media_type, to_flat_records
from dotacion.query.engine import QueryGateway

logger = logging.getLogger(__name__)

REPORT_SHEET_NAME = "Datos"


def parse_distinct_flag(value: Optional[str]) -> Optional[bool]:
    """``true``/``false`` from the query string; anything else means not specified."""
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized == "true":
        return True
    if normalized == "false":
        return False
    return None


class DownloadService:
    """Runs predefined reports and renders them as CSV or XLSX."""

    def __init__(self, registry: ReportRegistry, gateway: QueryGateway):
        self.registry = registry
        self.gateway = gateway

    def get_catalog(self) -> DownloadCatalog:
        return DownloadCatalog(
            blocks=[
                DownloadBlockRead(
                    id=block.value,
                    reports=[self._to_read(t) for t in self.registry.by_block(block)],
                )
                for block in self.registry.blocks()
            ]
        )

    def get_template(self, slug: str) -> Optional[ReportTemplate]:
        return self.registry.get(slug)

    def run_report(
        self,
        template: ReportTemplate,
        query_params: Mapping[str, str],
        export_format: str = "csv",
        distinct: Optional[bool] = None,
    ) -> ExportFile:
        """Resolve parameters, execute the report and render the download."""
        # Unknown formats fail before the query runs
        get_media_type(export_format)
        params = resolve_params(template, query_params)
        use_distinct = resolve_distinct(template, distinct)

        sql = template.build_sql(params, use_distinct)
        logger.info("Running report %s (distinct=%s)", template.slug, use_distinct)

        records = to_flat_records(self.gateway.execute(sql))
        return build_export_file(records, export_format, template.slug, sheet_name=REPORT_SHEET_NAME)

    @staticmethod
    def _to_read(template: ReportTemplate) -> ReportRead:
        return ReportRead(
            slug=template.slug,
            block=template.block.value,
            name=template.name,
            description=template.description,
            params=[
                ReportParamRead(
                    name=p.name,
                    label=p.label,
                    type=p.type.value,
                    options_endpoint=p.options_endpoint,
                    required=p.required,
                    default=p.default,
                )
                for p in template.params
            ],
            allow_distinct=template.allow_distinct,
            default_distinct=template.default_distinct,
            distinct_columns=list(template.distinct_columns),
        )
