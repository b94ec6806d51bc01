# dotacion/core/database.py
"""Database configuration: the read-only roster database and the request-log database."""

import logging
from datetime import date
from typing import Iterator

from fastapi import Request
from sqlalchemy import Column, Date, Integer, String, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# ===== DECLARATIVE BASES =====

# Roster tables. In production these live in an externally managed MySQL
# database; the models describe the schema for development and tests.
RosterBase = declarative_base()

# Request logs, kept in their own database
LogBase = declarative_base()


# ===== ROSTER MODELS =====


class Dotacion(RosterBase):
    """Government employee roster."""

    __tablename__ = "dotacion_gcba_prueba"

    id_dotacion = Column(Integer, primary_key=True)
    MINISTERIO = Column(String(255), index=True)
    CUIL = Column(String(20))
    AYN = Column(String(255))
    FEC_NACIM = Column(Date)
    SEXO = Column(String(10))
    TIP_DOC = Column(String(10))
    NUM_DOC = Column(String(20))
    INGRESO = Column(Date)
    ROL = Column(Integer)
    LIT_PUESTO = Column(String(255))
    REGIMEN = Column(String(100))
    SIGLA = Column(String(50))
    COD_REP = Column(String(50))
    DESC_REP = Column(String(255))
    PATH_NOMBRES = Column(String(1000))
    DOMICILIO_LABORAL = Column(String(255))
    LIT_AGRUPAMIENTO = Column(String(255))
    MAIL_LABORAL = Column(String(255))
    MAIL_PERSONAL = Column(String(255))
    MAIL_MIA = Column(String(255))
    DOMICILIO_PERSONAL = Column(String(255))
    CP = Column(String(10))
    DISCAP = Column(String(10))
    CUIL_SIN_GUIONES = Column(String(20), index=True)


class Padron(RosterBase):
    """Registry table without static column metadata; its columns are introspected."""

    __tablename__ = "padron"

    id_padron = Column(Integer, primary_key=True)
    CUIL = Column(String(20))
    AYN = Column(String(255))
    FEC_ALTA = Column(Date)
    CATEGORIA = Column(String(50))


# ===== ENGINES & SESSIONS =====


def build_engine(url: str) -> Engine:
    """Create an engine; SQLite gets thread-safe settings and in-memory SQLite a single shared connection."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request) -> Iterator[Session]:
    """Get a roster database session."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


# ===== INITIALIZATION =====


def init_log_db(engine: Engine) -> None:
    """Create the request-log tables."""
    from dotacion.logging.models import Log  # noqa: F401

    LogBase.metadata.create_all(bind=engine)


def init_roster_db(engine: Engine) -> None:
    """Create the roster tables and load sample rows. Development only."""
    RosterBase.metadata.create_all(bind=engine)
    create_sample_data(build_session_factory(engine))


def create_sample_data(session_factory: sessionmaker) -> None:
    """Insert a handful of roster rows if the table is empty."""
    with session_factory() as db:
        try:
            if db.query(Dotacion).count() > 0:
                logger.info("Sample roster data already exists. Skipping creation.")
                return

            db.add_all(
                [
                    Dotacion(
                        id_dotacion=1,
                        MINISTERIO="Salud",
                        CUIL="20-12345678-1",
                        CUIL_SIN_GUIONES="20123456781",
                        AYN="Pérez, Juan",
                        FEC_NACIM=date(1985, 4, 12),
                        SEXO="M",
                        INGRESO=date(2010, 3, 1),
                        ROL=101,
                        MAIL_LABORAL="jperez@example.gob.ar",
                        MAIL_PERSONAL="juan.perez@example.com",
                    ),
                    Dotacion(
                        id_dotacion=2,
                        MINISTERIO="Salud",
                        CUIL="27-23456789-2",
                        CUIL_SIN_GUIONES="27234567892",
                        AYN="Gómez, María",
                        FEC_NACIM=date(2003, 9, 30),
                        SEXO="F",
                        INGRESO=date(2022, 1, 10),
                        ROL=102,
                        MAIL_LABORAL="mgomez@example.gob.ar",
                        MAIL_PERSONAL="",
                    ),
                    Dotacion(
                        id_dotacion=3,
                        MINISTERIO="Educación",
                        CUIL="20-34567890-3",
                        CUIL_SIN_GUIONES="20345678903",
                        AYN="López, Carlos",
                        FEC_NACIM=date(1970, 1, 5),
                        SEXO="M",
                        INGRESO=date(1995, 6, 15),
                        ROL=201,
                        MAIL_LABORAL="clopez@example.gob.ar",
                        MAIL_PERSONAL="carlos@example.com",
                    ),
                ]
            )
            db.commit()
            logger.info("Sample roster data created")
        except Exception:
            db.rollback()
            logger.exception("Error creating sample roster data")
            raise
