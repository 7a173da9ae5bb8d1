# backend/db.py
# Database abstraction layer supporting PostgreSQL (production) and SQLite (dev)

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path as FsPath
from typing import Any, Dict, Generator, List, Optional, Union
from urllib.parse import urlparse

from sqlalchemy import create_engine, pool, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

try:
    from backend.config import DATABASE_PATH, DATABASE_URL, IS_DEV, IS_POSTGRES
except ModuleNotFoundError:
    from config import DATABASE_PATH, DATABASE_URL, IS_DEV, IS_POSTGRES


# Errors the routes collapse into a generic 500
DB_ERRORS = (sqlite3.Error, SQLAlchemyError)

# Canonical absolute path for the SQLite file (tests point this at a tmp file)
DB_PATH = str(FsPath(__file__).resolve().parent / DATABASE_PATH)

DbConnection = Union[sqlite3.Connection, Connection]

# Global engine (SQLAlchemy) or None for SQLite
_engine: Optional[Engine] = None


SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS projects (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        description TEXT DEFAULT '',
        status TEXT NOT NULL DEFAULT 'planning',
        priority TEXT NOT NULL DEFAULT 'medium',
        start_date TEXT,
        end_date TEXT,
        progress INTEGER NOT NULL DEFAULT 0,
        owner_id TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS project_members (
        project_id TEXT NOT NULL,
        user_id TEXT NOT NULL,
        position INTEGER NOT NULL DEFAULT 0,
        PRIMARY KEY (project_id, user_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tasks (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        description TEXT DEFAULT '',
        status TEXT NOT NULL DEFAULT 'todo',
        priority TEXT NOT NULL DEFAULT 'medium',
        project_id TEXT NOT NULL,
        assigned_to TEXT,
        created_by TEXT NOT NULL,
        due_date TEXT,
        estimated_hours REAL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_projects_owner ON projects (owner_id)",
    "CREATE INDEX IF NOT EXISTS idx_members_user ON project_members (user_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_project ON tasks (project_id)",
]


def init_engine() -> None:
    """Initialize SQLAlchemy engine for PostgreSQL if DATABASE_URL is set."""
    global _engine

    if not IS_POSTGRES:
        _engine = None
        print("[DB] Using SQLite (local dev mode)")
        return

    parsed = urlparse(DATABASE_URL)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"Invalid DATABASE_URL: {DATABASE_URL[:20]}...")

    # SQLAlchemy only understands the postgresql:// scheme
    url = DATABASE_URL
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]

    _engine = create_engine(
        url,
        poolclass=pool.QueuePool,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        echo=False,
    )

    print(f"[DB] Using PostgreSQL ({parsed.hostname})")


def connect() -> DbConnection:
    """Open a new connection. Caller is responsible for closing it."""
    if IS_POSTGRES:
        if _engine is None:
            init_engine()
        return _engine.connect()

    conn = sqlite3.connect(DB_PATH, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_db_connection() -> Generator[DbConnection, None, None]:
    """
    Context manager for database connections.
    Yields sqlite3.Connection for SQLite or sqlalchemy.Connection for Postgres.
    """
    conn = connect()
    try:
        yield conn
    finally:
        conn.close()


def execute(conn: DbConnection, query: str, params: Optional[Dict[str, Any]] = None) -> Any:
    """
    Execute a query with named (:param) placeholders.

    Both sqlite3 and SQLAlchemy text() accept the :name style, so every query
    in the codebase is written that way.

    Returns:
        Cursor (SQLite) or CursorResult (PostgreSQL); both expose rowcount
    """
    if IS_POSTGRES:
        return conn.execute(text(query), params or {})
    return conn.execute(query, params or {})


def row_to_dict(row) -> Optional[Dict[str, Any]]:
    """Convert a sqlite3.Row or SQLAlchemy Row to a plain dict (None stays None)."""
    if row is None:
        return None
    if hasattr(row, "_mapping"):
        return dict(row._mapping)
    return dict(row)


def fetch_one(conn: DbConnection, query: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
    return row_to_dict(execute(conn, query, params).fetchone())


def fetch_all(conn: DbConnection, query: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    return [row_to_dict(row) for row in execute(conn, query, params).fetchall()]


def commit(conn: DbConnection) -> None:
    conn.commit()


def rollback(conn: DbConnection) -> None:
    conn.rollback()


def init_db() -> None:
    """Create tables and indexes if they do not exist yet."""
    with get_db_connection() as conn:
        for statement in SCHEMA:
            execute(conn, statement)
        commit(conn)

    if IS_DEV:
        print(f"[DB] Schema ready ({'PostgreSQL' if IS_POSTGRES else DB_PATH})")
