"""Database connection and session management."""

from contextlib import contextmanager
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from apps.crm.config import Settings

# Base class for models
Base = declarative_base()


def create_db_engine(settings: Settings) -> Engine:
    """
    Build the process-wide engine and connection pool.

    Args:
        settings: Application settings

    Returns:
        Configured SQLAlchemy engine
    """
    if settings.is_sqlite:
        engine_kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in settings.database_url or settings.database_url in ("sqlite://", "sqlite:///"):
            # One shared connection, otherwise every checkout sees an empty database
            engine_kwargs["poolclass"] = StaticPool
        engine = create_engine(settings.database_url, **engine_kwargs)

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(
        settings.database_url,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=1800,
        connect_args={
            "connect_timeout": settings.db_connect_timeout,
            "options": f"-c statement_timeout={settings.db_statement_timeout_ms}",
        },
        echo=settings.log_level == "DEBUG",
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create the session factory bound to an engine."""
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency for FastAPI to get DB session."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Generator[Session, None, None]:
    """
    Run a block of writes atomically.

    Commits when the block finishes, rolls back everything written inside it
    when the block raises.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


@contextmanager
def get_db_context(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Context manager for DB session in scripts."""
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
