"""API router for quick downloads (descargas rápidas)."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import Response

from dotacion.core.dependencies import GatewayDep
from dotacion.downloads.registry import registry
from dotacion.downloads.schemas import DownloadCatalog
from dotacion.downloads.service import DownloadService, parse_distinct_flag

router = APIRouter(prefix="/descargas", tags=["descargas"])


def get_download_service(gateway: GatewayDep) -> DownloadService:
    return DownloadService(registry, gateway)


@router.get("", response_model=DownloadCatalog)
def get_catalog(service: DownloadService = Depends(get_download_service)) -> DownloadCatalog:
    """All predefined reports, grouped by block."""
    return service.get_catalog()


@router.get("/{slug}")
def download_report(
    slug: str,
    request: Request,
    format: str = Query("csv", description="csv o xlsx"),
    distinct: Optional[str] = Query(None),
    service: DownloadService = Depends(get_download_service),
) -> Response:
    """Run a predefined report; any other query-string keys are report parameters."""
    template = service.get_template(slug)
    if template is None:
        raise HTTPException(status_code=404, detail="Descarga no encontrada")

    download = service.run_report(
        template,
        request.query_params,
        export_format=format,
        distinct=parse_distinct_flag(distinct),
    )
    return Response(
        content=download.content,
        media_type=download.media_type,
        headers={"Content-Disposition": f'attachment; filename="{download.filename}"'},
    )
