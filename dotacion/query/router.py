"""API routers for the visual query builder and table metadata."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from dotacion.core.dependencies import GatewayDep, SessionDep
from dotacion.query.introspection import SchemaIntrospector
from dotacion.query.meta import is_valid_table
from dotacion.query.schemas import QueryExecutionResponse, QueryStructure
from dotacion.query.service import MetaService, QueryService

router = APIRouter(prefix="/query", tags=["query"])
meta_router = APIRouter(prefix="/meta", tags=["meta"])


# Dependency functions
def get_query_service(gateway: GatewayDep) -> QueryService:
    return QueryService(gateway)


def get_meta_service(db: SessionDep, gateway: GatewayDep) -> MetaService:
    return MetaService(gateway, SchemaIntrospector(db.get_bind()))


# ===== QUERY BUILDER ENDPOINTS =====


@router.post("/execute", response_model=QueryExecutionResponse)
def execute_query(
    query: QueryStructure, service: QueryService = Depends(get_query_service)
) -> QueryExecutionResponse:
    """Run a builder query and return the rows with the display SQL."""
    return service.execute(query)


@router.post("/export")
def export_query(
    query: QueryStructure,
    format: str = Query("csv", description="csv o xlsx"),
    service: QueryService = Depends(get_query_service),
) -> Response:
    export = service.export(query, format)
    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


# ===== METADATA ENDPOINTS =====


@meta_router.get("/tablas")
def get_tables(service: MetaService = Depends(get_meta_service)) -> List[Dict[str, str]]:
    return service.get_tables()


@meta_router.get("/columnas")
def get_columns(
    tabla: Optional[str] = Query(None), service: MetaService = Depends(get_meta_service)
) -> List[Dict[str, str]]:
    if not tabla:
        raise HTTPException(status_code=400, detail='Parámetro "tabla" requerido')
    if not is_valid_table(tabla):
        raise HTTPException(status_code=403, detail="Tabla no permitida")

    columns = service.get_columns(tabla)
    if not columns:
        raise HTTPException(status_code=404, detail="Tabla no encontrada o sin columnas")
    return [col.to_dict() for col in columns]


@meta_router.get("/ministerios")
def get_ministries(service: MetaService = Depends(get_meta_service)) -> Dict[str, List[str]]:
    return {"ministerios": service.get_ministries()}


@meta_router.get("/tablas-disponibles")
def get_available_tables(service: MetaService = Depends(get_meta_service)) -> Dict[str, Any]:
    """Diagnostics: every physical table in the roster database."""
    return service.get_available_tables()
