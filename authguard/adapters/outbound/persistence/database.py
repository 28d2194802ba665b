# authguard/adapters/outbound/persistence/database.py

"""
Engine and session factory for the durable revocation store.
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from authguard.adapters.outbound.persistence.models.base_model import Base
# Register models on Base.metadata
from authguard.adapters.outbound.persistence.models import token_blacklist_model  # noqa: F401

logger = logging.getLogger(__name__)


def _is_memory_sqlite(database_url: str) -> bool:
    return ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///")


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine.

    In-memory SQLite lives in a single connection, so the engine uses a
    StaticPool and every session shares that connection. Callers running
    sessions from several threads must serialize them (see
    ``shares_single_connection``).
    """
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        if _is_memory_sqlite(database_url):
            return create_engine(database_url, echo=echo, connect_args=connect_args, poolclass=StaticPool)
        return create_engine(database_url, echo=echo, connect_args=connect_args)
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


def shares_single_connection(engine: Engine) -> bool:
    """True when every session of ``engine`` gets the same DBAPI connection."""
    return isinstance(engine.pool, StaticPool)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create the tables this package owns if they do not exist."""
    Base.metadata.create_all(bind=engine)
    logger.info(f"Database tables ensured on {engine.url.render_as_string(hide_password=True)}")
