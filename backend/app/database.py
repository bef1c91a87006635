"""
Database engine and session setup for the student registry.

The registry keeps its records in a single SQLAlchemy-mapped table.
PostgreSQL is used when DATABASE_URL points at it; otherwise a local
SQLite file holds the data so the registry survives restarts.
"""

import os
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, DeclarativeBase

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    "sqlite:///./student_registry.db"
)


def make_engine(url: str):
    """
    Build an engine with backend-specific options.

    SQLite rejects pooling options, and its connections are shared across
    FastAPI worker threads, so check_same_thread is disabled there.
    """
    engine_kwargs = {"echo": False}

    if url.startswith("postgresql"):
        engine_kwargs.update({
            "pool_size": 5,
            "max_overflow": 10,
            "pool_pre_ping": True,
        })
    elif url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}

    new_engine = create_engine(url, **engine_kwargs)

    if url.startswith("sqlite"):
        @event.listens_for(new_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


engine = make_engine(DATABASE_URL)

# Session factory used by the process-wide registry.
# Records outlive their session, so attributes must not expire on commit.
SessionLocal = sessionmaker(autoflush=False, expire_on_commit=False, bind=engine)


class Base(DeclarativeBase):
    """Declarative base for the registry's ORM models."""
    pass


def create_tables(bind=None):
    """
    Create the students table if it does not exist yet.
    Used for SQLite; PostgreSQL deployments run the Alembic migration.
    """
    Base.metadata.create_all(bind=bind or engine)
