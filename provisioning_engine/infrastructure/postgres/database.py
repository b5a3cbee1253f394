#provisioning_engine\infrastructure\postgres\database.py

"""SQLAlchemy database setup and session management."""

from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from provisioning_engine.config import settings


# ============================================
# Base for ORM models
# ============================================
Base = declarative_base()


# ============================================
# Engine configuration
# ============================================
def create_db_engine(database_url: Optional[str] = None) -> Engine:
    """Create SQLAlchemy engine with connection pooling."""

    url = database_url or settings.database_url

    if url.startswith("sqlite"):
        engine = create_engine(url, echo=settings.echo_sql)

        @event.listens_for(engine, "connect")
        def enable_foreign_keys(dbapi_conn, connection_record):
            """SQLite ignores foreign keys unless asked."""
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    engine = create_engine(
        url,
        echo=settings.echo_sql,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
        pool_recycle=settings.pool_recycle,
    )

    # Set PostgreSQL-specific settings
    @event.listens_for(engine, "connect")
    def set_search_path(dbapi_conn, connection_record):
        """Set default schema on connect."""
        cursor = dbapi_conn.cursor()
        cursor.execute("SET search_path TO public")
        cursor.close()

    return engine


# Engine and session factory are built on first use so importing the
# package does not require a reachable database.
_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


# ============================================
# Session factory function
# ============================================
def get_session_factory(engine_instance: Optional[Engine] = None) -> sessionmaker:
    """
    Get a session factory bound to the given engine.

    If no engine provided, uses the default production engine.
    This allows tests to inject their own test engine.
    """
    global _session_factory

    if engine_instance is not None:
        return sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=engine_instance,
            expire_on_commit=False
        )

    if _session_factory is None:
        _session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=get_engine(),
            expire_on_commit=False
        )
    return _session_factory


# ============================================
# Database initialization
# ============================================
def init_db(engine_instance: Optional[Engine] = None) -> None:
    """Create all tables (for testing only - use Alembic in production)."""
    # Register the models on Base.metadata
    from provisioning_engine.infrastructure.postgres import models  # noqa: F401

    Base.metadata.create_all(bind=engine_instance or get_engine())


def drop_db(engine_instance: Optional[Engine] = None) -> None:
    """Drop all tables (for testing only)."""
    Base.metadata.drop_all(bind=engine_instance or get_engine())
