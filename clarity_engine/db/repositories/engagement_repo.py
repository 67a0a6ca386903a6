"""
Repository for ``engagement_events`` (append-only).
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Optional

from clarity_engine.db.repositories.base import BaseRepository
from clarity_engine.models.engagement import EngagementEvent
from clarity_engine.utils.time_utils import from_db, to_db

logger = logging.getLogger(__name__)


class EngagementRepository(BaseRepository):
    """Read/write access to ``engagement_events``."""

    def insert(self, event: EngagementEvent) -> int:
        """Record one engagement event and return its ``event_id``.

        Raises:
            sqlite3.IntegrityError: If ``event.recommendation_id`` does not exist.
        """
        self.execute(
            """
            INSERT INTO engagement_events (
                recommendation_id, user_id, action, rating,
                time_spent_seconds, occurred_at
            ) VALUES (?, ?, ?, ?, ?, ?);
            """,
            (
                event.recommendation_id,
                event.user_id,
                str(event.action),
                event.rating,
                event.time_spent_seconds,
                to_db(event.occurred_at),
            ),
        )
        return self.last_insert_rowid()

    def list_for_user(
        self,
        user_id: str,
        since: Optional[datetime] = None,
    ) -> list[EngagementEvent]:
        """Events for one user, oldest first, optionally from ``since`` onward."""
        if since is not None:
            rows = self.fetchall(
                """
                SELECT * FROM engagement_events
                WHERE user_id = ? AND occurred_at >= ?
                ORDER BY occurred_at, event_id;
                """,
                (user_id, to_db(since)),
            )
        else:
            rows = self.fetchall(
                "SELECT * FROM engagement_events WHERE user_id = ? ORDER BY occurred_at, event_id;",
                (user_id,),
            )
        return [_row_to_event(r) for r in rows]

    def list_for_recommendation(self, recommendation_id: int) -> list[EngagementEvent]:
        rows = self.fetchall(
            """
            SELECT * FROM engagement_events
            WHERE recommendation_id = ?
            ORDER BY occurred_at, event_id;
            """,
            (recommendation_id,),
        )
        return [_row_to_event(r) for r in rows]


def _row_to_event(row: sqlite3.Row) -> EngagementEvent:
    return EngagementEvent(
        event_id=row["event_id"],
        recommendation_id=row["recommendation_id"],
        user_id=row["user_id"],
        action=row["action"],
        rating=row["rating"],
        time_spent_seconds=row["time_spent_seconds"],
        occurred_at=from_db(row["occurred_at"]),
    )
