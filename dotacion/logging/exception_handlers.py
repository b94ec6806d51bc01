# dotacion/logging/exception_handlers.py

import json
import logging
import traceback

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from dotacion.logging.middleware import current_hostname, current_username, write_log
from dotacion.query.exceptions import DatabaseError, SQLValidationError

logger = logging.getLogger(__name__)


def safe_json_dumps(obj) -> str:
    return json.dumps(obj, indent=2, default=str)


def _convert_error(error):
    if isinstance(error, dict):
        return {k: _convert_error(v) for k, v in error.items()}
    if isinstance(error, list):
        return [_convert_error(item) for item in error]
    return str(error)


async def sql_validation_exception_handler(request: Request, exc: SQLValidationError):
    """Rejected query descriptions and report requests."""
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def database_exception_handler(request: Request, exc: DatabaseError):
    """Database failures; driver messages are only exposed in verbose mode."""
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc.original or exc)

    content = {"detail": exc.message}
    if request.app.state.settings.verbose_errors:
        content["details"] = str(exc.original or exc)
    return JSONResponse(status_code=exc.status_code, content=content)


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors"""
    return JSONResponse(
        status_code=422,
        content={"detail": _convert_error(exc.errors())},
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions and log them to the log database"""
    error_traceback = traceback.format_exc()
    logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc)

    write_log(
        request.app.state.log_session_factory,
        method=request.method,
        path=str(request.url.path),
        query_string=str(request.url.query) or None,
        status_code=500,
        client_ip=request.client.host if request.client else None,
        error_detail=safe_json_dumps(
            {"error": str(exc), "type": type(exc).__name__, "traceback": error_traceback}
        ),
        user_agent=request.headers.get("user-agent"),
        username=current_username(),
        hostname=current_hostname(),
        application_id=request.app.state.settings.application_id,
    )

    return JSONResponse(
        status_code=500,
        content={"detail": "Internal Server Error"},
    )
