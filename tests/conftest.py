"""
Test configuration and shared fixtures for the dotación test suite.
Provides the in-memory roster database, sample rows, and the API test client.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from dotacion.app import create_app
from dotacion.core.config import Settings
from dotacion.core.database import RosterBase, build_engine, create_sample_data, get_db
from dotacion.query.engine import QueryGateway


# ===== SETTINGS =====


@pytest.fixture
def settings():
    """Development-style settings backed by in-memory databases"""
    return Settings(
        environment="development",
        database_url="sqlite://",
        log_database_url="sqlite://",
        verbose_errors=True,
        log_queries=True,
        log_requests=True,
    )


# ===== DATABASE SETUP =====


@pytest.fixture
def roster_engine():
    """In-memory SQLite roster database with the sample rows loaded"""
    engine = build_engine("sqlite://")
    RosterBase.metadata.create_all(bind=engine)
    create_sample_data(sessionmaker(autocommit=False, autoflush=False, bind=engine))
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(roster_engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=roster_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def gateway(db_session):
    return QueryGateway(db_session, max_rows=100)


# ===== API CLIENT =====


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app, db_session):
    """FastAPI test client with the roster session overridden"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ===== QUERY HELPERS =====


def _column(name, table="dotacion_gcba_prueba"):
    return {"table": table, "column": name}


@pytest.fixture
def simple_query():
    """Names of everyone in the Salud ministry"""
    return {
        "select": [_column("AYN")],
        "from": {"name": "dotacion_gcba_prueba"},
        "where": [{"left": _column("MINISTERIO"), "operator": "=", "rightValue": "Salud"}],
    }
