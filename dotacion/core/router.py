# dotacion/core/router.py
"""
Module for registering routes in the FastAPI application.
"""

from fastapi import FastAPI

from dotacion.downloads.router import router as downloads_router
from dotacion.health.router import router as health_router
from dotacion.query.router import meta_router
from dotacion.query.router import router as query_router


def register_routes(app: FastAPI) -> None:
    """
    Registers all the routes for the FastAPI application.

    Args:
        app (FastAPI): The FastAPI application instance.
    """
    app.include_router(query_router, prefix="/api")
    app.include_router(meta_router, prefix="/api")
    app.include_router(downloads_router, prefix="/api")
    app.include_router(health_router, prefix="/api")
