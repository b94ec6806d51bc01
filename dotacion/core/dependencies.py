# dotacion/core/dependencies.py
"""Shared FastAPI dependencies"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from dotacion.core.config import Settings
from dotacion.core.database import get_db
from dotacion.query.engine import QueryGateway


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


# Core dependencies
SessionDep = Annotated[Session, Depends(get_db)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_query_gateway(db: SessionDep, settings: SettingsDep) -> QueryGateway:
    """Read-only gateway bound to the request's roster session"""
    return QueryGateway(db, max_rows=settings.max_rows, log_queries=settings.log_queries)


GatewayDep = Annotated[QueryGateway, Depends(get_query_gateway)]
