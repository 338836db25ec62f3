"""
Database connection and session management module.

Uses SQLAlchemy for ORM operations. Supports PostgreSQL (production/Docker)
and SQLite (local development fallback).
Attendance uniqueness rules rely on the unique constraints declared on the
models, so every backend must enforce them on commit.
"""

import os
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, DeclarativeBase

# Read database URL from environment
# Fallback to SQLite for local development when PostgreSQL is not available
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    "sqlite:///./attendance.db"
)


def build_engine(url: str):
    """
    Create an engine with backend-specific pool settings.

    SQLite does not support pool_size, max_overflow, or pool_pre_ping, and
    needs check_same_thread=False because FastAPI serves sync routes from a
    thread pool.
    """
    engine_kwargs = {"echo": False}

    if url.startswith("postgresql"):
        engine_kwargs.update({
            "pool_size": 10,
            "max_overflow": 20,
            "pool_pre_ping": True,
        })
    elif url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}

    new_engine = create_engine(url, **engine_kwargs)

    # Enable WAL mode and foreign keys for SQLite (better concurrency)
    if url.startswith("sqlite"):
        @event.listens_for(new_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


engine = build_engine(DATABASE_URL)

# Session factory - creates new database sessions
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


def get_db():
    """
    FastAPI dependency that provides a database session.

    Yields a session and ensures it is closed after the request, returning
    the connection to the pool even if the handler raised.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind=None):
    """
    Create all database tables directly (used for SQLite local dev and tests).
    For PostgreSQL, use Alembic migrations instead.
    """
    Base.metadata.create_all(bind=bind or engine)
