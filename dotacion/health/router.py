"""Health check and database connectivity probe."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from dotacion.core.dependencies import GatewayDep, SettingsDep
from dotacion.query.exceptions import DatabaseError
from dotacion.query.validator import escape_identifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("")
def health_check(gateway: GatewayDep, settings: SettingsDep):
    """Check that the app is up and the roster table can be read."""
    try:
        gateway.ping()
        rows = gateway.execute(f"SELECT COUNT(*) AS count FROM {escape_identifier('dotacion_gcba_prueba')}")
    except DatabaseError as e:
        logger.error("Health check failed: %s", e.original or e)
        content = {
            "status": "error",
            "message": "Error de conexión a la base de datos",
            "database": "disconnected",
            "timestamp": _now(),
        }
        if settings.verbose_errors:
            content["error"] = str(e.original or e)
        return JSONResponse(status_code=500, content=content)

    return {
        "status": "ok",
        "message": "Aplicación y base de datos funcionando correctamente",
        "database": "connected",
        "tableAccessible": len(rows) > 0,
        "timestamp": _now(),
    }
