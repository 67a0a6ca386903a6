"""
SQLite connection management for the lifecycle store.

``get_connection()`` yields a connection with foreign keys on, an optional
WAL journal, a busy timeout, and ``sqlite3.Row`` rows. It commits on clean
exit and rolls back on any exception, so everything done inside one
``with`` block is a single transaction from the caller's point of view.

Usage::

    from clarity_engine.db.connection import get_connection

    with get_connection(config.database.db_path) as conn:
        RecommendationRepository(conn).supersede_and_insert(records)
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Generator

if TYPE_CHECKING:
    from clarity_engine.config import DatabaseConfig

logger = logging.getLogger(__name__)


@contextmanager
def get_connection(
    db_path: str,
    wal_mode: bool = True,
    busy_timeout_ms: int = 5000,
) -> Generator[sqlite3.Connection, None, None]:
    """Context manager yielding a configured SQLite connection.

    Args:
        db_path: Path to the database file, or ``":memory:"``. Parent
            directories of a file path are created if missing.
        wal_mode: Enable WAL journal mode.
        busy_timeout_ms: Milliseconds to wait on a locked database before
            raising ``OperationalError``.

    Yields:
        An open, configured ``sqlite3.Connection``.

    Raises:
        sqlite3.OperationalError: If the database cannot be opened or stays locked.
    """
    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path, timeout=busy_timeout_ms / 1000)
    conn.row_factory = sqlite3.Row

    try:
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)};")
        if wal_mode:
            conn.execute("PRAGMA journal_mode = WAL;")

        yield conn
        conn.commit()

    except Exception:
        conn.rollback()
        raise

    finally:
        conn.close()


@contextmanager
def connect_from_config(
    config: "DatabaseConfig",
    db_path: str | None = None,
) -> Generator[sqlite3.Connection, None, None]:
    """``get_connection`` with settings taken from ``[database]``.

    Args:
        config: Database section of ``AppConfig``.
        db_path: Overrides ``config.db_path`` when given.
    """
    with get_connection(
        db_path or config.db_path,
        wal_mode=config.wal_mode,
        busy_timeout_ms=config.busy_timeout_ms,
    ) as conn:
        yield conn
