"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), applying migrations on application start
(``init_db``) and a helper dependency for FastAPI routes
(``get_db``).  Services never open connections themselves; they are
handed one at construction time.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .config import settings

logger = logging.getLogger(__name__)

# Ordered list of (version, script).  Append new migrations with an
# incremented version number; never edit one that has shipped.
MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: users and friendships
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            username TEXT NOT NULL UNIQUE,
            age INTEGER NOT NULL CHECK (age >= 0),
            hobbies TEXT NOT NULL,
            created_at TEXT NOT NULL
        );

        -- One row per unordered pair, smaller id first.  No ON DELETE
        -- CASCADE: users with friendships must be unlinked before they
        -- can be deleted.
        CREATE TABLE IF NOT EXISTS friendships (
            user1_id TEXT NOT NULL,
            user2_id TEXT NOT NULL,
            PRIMARY KEY (user1_id, user2_id),
            FOREIGN KEY (user1_id) REFERENCES users(id),
            FOREIGN KEY (user2_id) REFERENCES users(id),
            CHECK (user1_id < user2_id)
        );
        """,
    ),
    # Migration 2: lookups by either side of a friendship
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_friendships_user1 ON friendships(user1_id);
        CREATE INDEX IF NOT EXISTS idx_friendships_user2 ON friendships(user2_id);
        """,
    ),
]


MEMORY_DATABASE = ":memory:"
# A configured ``:memory:`` database must be visible to the startup
# migrations and to every request connection, so it is opened as a
# named shared-cache database.  SQLite drops such a database when its
# last connection closes; ``_memory_anchor`` stays open for the
# lifetime of the process.
SHARED_MEMORY_URI = "file:social_graph_api?mode=memory&cache=shared"

_memory_anchor: Optional[sqlite3.Connection] = None


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path or ``:memory:``,
    use it directly.  Otherwise resolve it relative to the project root.
    """
    db_url = settings.database_url
    if db_url == MEMORY_DATABASE or os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent  # project root
    return str((base_dir / db_url).resolve())


def _connect(target: str, uri: bool = False) -> sqlite3.Connection:
    conn = sqlite3.connect(target, check_same_thread=False, uri=uri)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def get_connection(path: Optional[str] = None) -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    The connection uses a row factory to access columns by name and
    has foreign key enforcement switched on (SQLite disables it per
    connection by default).  ``check_same_thread`` is off because
    FastAPI may resolve a dependency and run the endpoint on different
    threads; each connection is still used by one request at a time.

    An explicit ``path`` is opened as given, so ``get_connection(":memory:")``
    yields a private database.  When the configured database is
    ``:memory:``, every connection shares one in-memory database.
    """
    global _memory_anchor
    if path is not None:
        return _connect(path)
    db_path = get_database_path()
    if db_path != MEMORY_DATABASE:
        return _connect(db_path)
    if _memory_anchor is None:
        _memory_anchor = _connect(SHARED_MEMORY_URI, uri=True)
    return _connect(SHARED_MEMORY_URI, uri=True)


@contextmanager
def get_cursor(conn: Optional[sqlite3.Connection] = None) -> Iterator[sqlite3.Cursor]:
    """Yield a cursor and commit on success.

    When no connection is supplied a new one is opened and closed on
    exit; a supplied connection is left open for the caller.
    """
    owned = conn is None
    if conn is None:
        conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        if owned:
            conn.close()


def get_db() -> Iterator[sqlite3.Connection]:
    """FastAPI dependency yielding a per-request connection."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


def init_db(conn: Optional[sqlite3.Connection] = None) -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any newer entries from
    ``MIGRATIONS``.
    """
    with get_cursor(conn) as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                logger.info("Applying migration %s", version)
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version
