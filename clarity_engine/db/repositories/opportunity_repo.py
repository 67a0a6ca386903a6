"""
Repository for ``opportunities``.

Status changes go through ``transition()``, which validates the edge with the
lifecycle graph and then writes with a compare-and-swap
(``WHERE status = <expected>``). If another writer moved the row first, the
update touches nothing and ``InvalidTransition`` is raised against the status
actually stored.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from typing import Optional

from clarity_engine.db.repositories.base import BaseRepository
from clarity_engine.lifecycle.state_machine import InvalidTransition, transition_opportunity
from clarity_engine.models.opportunity import Opportunity
from clarity_engine.models.signal import Signal
from clarity_engine.taxonomy.recommendation_taxonomy import OpportunityStatus
from clarity_engine.utils.time_utils import from_db, to_db

logger = logging.getLogger(__name__)


class OpportunityRepository(BaseRepository):
    """Read/write access to ``opportunities``."""

    def insert(self, opportunity: Opportunity) -> int:
        """Insert an opportunity and return its ``opportunity_id``."""
        self.execute(
            """
            INSERT INTO opportunities (
                user_id, title, source_signal, estimated_value, priority,
                status, summary, follow_up_actions, created_at,
                last_action_at, follow_up_date
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
            """,
            (
                opportunity.user_id,
                opportunity.title,
                opportunity.source_signal.model_dump_json(),
                opportunity.estimated_value,
                str(opportunity.priority),
                str(opportunity.status),
                opportunity.summary,
                json.dumps(opportunity.follow_up_actions),
                to_db(opportunity.created_at),
                to_db(opportunity.last_action_at),
                to_db(opportunity.follow_up_date),
            ),
        )
        return self.last_insert_rowid()

    def get(self, opportunity_id: int) -> Optional[Opportunity]:
        row = self.fetchone(
            "SELECT * FROM opportunities WHERE opportunity_id = ?;", (opportunity_id,)
        )
        return _row_to_opportunity(row) if row else None

    def list_for_user(
        self,
        user_id: str,
        status: Optional[OpportunityStatus] = None,
        limit: int = 50,
    ) -> list[Opportunity]:
        """Opportunities for one user, newest first, optionally filtered by status."""
        if status is not None:
            rows = self.fetchall(
                """
                SELECT * FROM opportunities
                WHERE user_id = ? AND status = ?
                ORDER BY created_at DESC, opportunity_id DESC LIMIT ?;
                """,
                (user_id, str(status), limit),
            )
        else:
            rows = self.fetchall(
                """
                SELECT * FROM opportunities
                WHERE user_id = ?
                ORDER BY created_at DESC, opportunity_id DESC LIMIT ?;
                """,
                (user_id, limit),
            )
        return [_row_to_opportunity(r) for r in rows]

    def transition(
        self,
        opportunity_id: int,
        target: OpportunityStatus,
        at: Optional[datetime] = None,
    ) -> Opportunity:
        """Move an opportunity along its lifecycle graph.

        Args:
            opportunity_id: Row to update.
            target: Requested status.
            at: Action time (UTC); defaults to now.

        Returns:
            The updated ``Opportunity``.

        Raises:
            ValueError: If no such opportunity exists.
            InvalidTransition: If the move is not allowed from the stored status.
        """
        current = self.get(opportunity_id)
        if current is None:
            raise ValueError(f"Opportunity {opportunity_id} not found.")

        updated = transition_opportunity(current, target, at)
        cursor = self.execute(
            """
            UPDATE opportunities
               SET status = ?, last_action_at = ?
             WHERE opportunity_id = ? AND status = ?;
            """,
            (
                str(updated.status),
                to_db(updated.last_action_at),
                opportunity_id,
                str(current.status),
            ),
        )
        if cursor.rowcount == 0:
            latest = self.get(opportunity_id)
            stored = latest.status if latest else current.status
            raise InvalidTransition("opportunity", stored, target)

        logger.info(
            "Opportunity %d: %s → %s", opportunity_id, current.status, updated.status
        )
        return updated


# ── Private helpers ────────────────────────────────────────────────────────────

def _row_to_opportunity(row: sqlite3.Row) -> Opportunity:
    return Opportunity(
        opportunity_id=row["opportunity_id"],
        user_id=row["user_id"],
        title=row["title"],
        source_signal=Signal.model_validate_json(row["source_signal"]),
        estimated_value=row["estimated_value"],
        priority=row["priority"],
        status=row["status"],
        summary=row["summary"],
        follow_up_actions=json.loads(row["follow_up_actions"]),
        created_at=from_db(row["created_at"]),
        last_action_at=from_db(row["last_action_at"]),
        follow_up_date=from_db(row["follow_up_date"]),
    )
