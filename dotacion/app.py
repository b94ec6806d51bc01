"""FastAPI application factory for the dotación query service."""

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from dotacion.core.config import Settings
from dotacion.core.database import (
    build_engine,
    build_session_factory,
    init_log_db,
    init_roster_db,
)
from dotacion.core.router import register_routes
from dotacion.logging.exception_handlers import (
    database_exception_handler,
    general_exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    sql_validation_exception_handler,
)
from dotacion.logging.middleware import LoggingMiddleware
from dotacion.query.exceptions import DatabaseError, SQLValidationError

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    app = FastAPI(
        title="Dotación GCBA",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    app.state.settings = settings

    # Roster database (read-only in production)
    app.state.engine = build_engine(settings.database_url)
    app.state.session_factory = build_session_factory(app.state.engine)

    # Request log database
    app.state.log_engine = build_engine(settings.log_database_url)
    app.state.log_session_factory = build_session_factory(app.state.log_engine)
    init_log_db(app.state.log_engine)

    if settings.seed_sample_data:
        logger.info("Creating roster schema and sample data")
        init_roster_db(app.state.engine)

    # Add request logger middleware
    app.add_middleware(LoggingMiddleware, application_id=settings.application_id)

    app.add_exception_handler(SQLValidationError, sql_validation_exception_handler)
    app.add_exception_handler(DatabaseError, database_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)

    logger.info("Application started in %s mode (max_rows=%d)", settings.environment, settings.max_rows)
    return app
