"""
Base repository with shared SQLite helpers.

Repositories receive an open ``sqlite3.Connection`` (normally from
``get_connection()``) and never commit or close it themselves; the
connection owner decides the transaction boundary. Multi-statement writes
that must be all-or-nothing inside a larger transaction use ``savepoint()``.

  - No ORM - all SQL is explicit and lives in repository methods.
  - Repositories speak Pydantic models, not raw dicts.
  - ``row_factory = sqlite3.Row`` gives dict-like row access.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from typing import Any, Generator, Optional

logger = logging.getLogger(__name__)


class BaseRepository:
    """Shared SQL execution helpers for all repository classes.

    Attributes:
        conn: The active ``sqlite3.Connection``.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def execute(
        self,
        sql: str,
        params: tuple[Any, ...] | dict[str, Any] = (),
    ) -> sqlite3.Cursor:
        """Execute a single SQL statement and return its cursor."""
        logger.debug("SQL: %s | params: %s", sql.strip(), params)
        return self.conn.execute(sql, params)

    def fetchone(
        self,
        sql: str,
        params: tuple[Any, ...] | dict[str, Any] = (),
    ) -> Optional[sqlite3.Row]:
        """Execute a query and return the first row, or ``None``."""
        return self.execute(sql, params).fetchone()

    def fetchall(
        self,
        sql: str,
        params: tuple[Any, ...] | dict[str, Any] = (),
    ) -> list[sqlite3.Row]:
        """Execute a query and return all rows."""
        return self.execute(sql, params).fetchall()

    def last_insert_rowid(self) -> int:
        """Return the rowid of the last successful INSERT."""
        row = self.fetchone("SELECT last_insert_rowid() AS rowid;")
        assert row is not None
        return int(row["rowid"])

    @contextmanager
    def savepoint(self, name: str) -> Generator[None, None, None]:
        """Run the enclosed statements atomically.

        On exception everything since the savepoint is rolled back and the
        exception propagates; the enclosing transaction (if any) survives.

        Args:
            name: SQL identifier for the savepoint.
        """
        self.conn.execute(f"SAVEPOINT {name};")
        try:
            yield
        except Exception:
            self.conn.execute(f"ROLLBACK TO SAVEPOINT {name};")
            self.conn.execute(f"RELEASE SAVEPOINT {name};")
            raise
        self.conn.execute(f"RELEASE SAVEPOINT {name};")
