"""
Database connection and session management.
Provides SQLAlchemy engine, session factory, and base model class.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from nitpick.config import get_settings

settings = get_settings()


def _engine_options(database_url: str) -> dict:
    """Pooling options for the configured backend."""
    if database_url.startswith("sqlite"):
        # SQLite connections are shared across FastAPI's threadpool
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,  # Verify connections before use
        "pool_size": 10,        # Maximum connections in pool
        "max_overflow": 20,     # Additional connections when pool is full
    }


def enable_sqlite_savepoints(sqlite_engine: Engine) -> None:
    """
    Let SQLAlchemy own BEGIN on SQLite so SAVEPOINT behaves.

    pysqlite otherwise defers BEGIN until the first DML statement, which
    breaks nested transactions.
    """

    @event.listens_for(sqlite_engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


# Create SQLAlchemy engine with connection pooling
engine = create_engine(settings.database_url, **_engine_options(settings.database_url))
if engine.dialect.name == "sqlite":
    enable_sqlite_savepoints(engine)

# Session factory for creating database sessions
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all ORM models
Base = declarative_base()


def get_db():
    """
    Dependency that provides a database session.
    Ensures proper cleanup after request completion.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """
    Initialize database by creating all tables.
    Safe to call multiple times - only creates tables that don't exist.
    """
    # Import all models to register them with Base.metadata
    from nitpick import models  # noqa
    Base.metadata.create_all(bind=bind or engine)
