"""
Repository for ``active_recommendations``.

Supersede rule: inserting a record for ``(user_id, rec_type, title)`` first
expires any row for that identity that is still ``active``. Both statements
run inside one savepoint, and the partial unique index
``uq_active_rec_identity`` rejects a second active row written by a racing
pass, so the invariant holds even when two passes overlap.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from clarity_engine.db.repositories.base import BaseRepository
from clarity_engine.lifecycle.state_machine import (
    InvalidTransition,
    transition_recommendation,
)
from clarity_engine.models.recommendation import ActiveRecommendation
from clarity_engine.taxonomy.recommendation_taxonomy import RecommendationStatus
from clarity_engine.utils.time_utils import from_db, to_db, utcnow

logger = logging.getLogger(__name__)


@dataclass
class SupersedeResult:
    """Outcome of one ``supersede_and_insert`` call."""

    inserted_ids: list[int] = field(default_factory=list)
    expired_count: int = 0


class RecommendationRepository(BaseRepository):
    """Read/write access to ``active_recommendations``."""

    def insert(self, rec: ActiveRecommendation) -> int:
        """Insert one record as-is and return its ``rec_id``.

        Raises:
            sqlite3.IntegrityError: If ``rec`` is active and an active row
                with the same identity already exists.
        """
        self.execute(
            """
            INSERT INTO active_recommendations (
                user_id, rec_type, title, description, base_priority,
                complexity, applicable_industries, applicable_business_sizes,
                focus_area, hook, expected_impact, time_to_implement,
                reasoning, score, score_components, status, created_at,
                expires_at, updated_at, run_slug
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
            """,
            (
                rec.user_id,
                rec.rec_type,
                rec.title,
                rec.description,
                str(rec.base_priority),
                str(rec.complexity),
                json.dumps(sorted(rec.applicable_industries)),
                json.dumps(sorted(rec.applicable_business_sizes)),
                str(rec.focus_area) if rec.focus_area else None,
                rec.hook,
                rec.expected_impact,
                rec.time_to_implement,
                rec.reasoning,
                rec.score,
                json.dumps(rec.score_components),
                str(rec.status),
                to_db(rec.created_at),
                to_db(rec.expires_at),
                to_db(rec.updated_at),
                rec.run_slug,
            ),
        )
        return self.last_insert_rowid()

    def supersede_and_insert(
        self,
        records: Iterable[ActiveRecommendation],
        at: Optional[datetime] = None,
    ) -> SupersedeResult:
        """Expire matching active rows and insert the replacements, atomically.

        Args:
            records: New ``active`` records, typically one pass for one user.
            at: Time stamped on expired rows; defaults to now.

        Returns:
            ``SupersedeResult`` with new row ids and the number of rows expired.

        Raises:
            sqlite3.IntegrityError: If a concurrent writer inserted an active
                row for one of the identities; nothing from this call persists.
        """
        stamp = to_db(at or utcnow())
        result = SupersedeResult()
        with self.savepoint("supersede_recommendations"):
            for rec in records:
                cursor = self.execute(
                    """
                    UPDATE active_recommendations
                       SET status = 'expired', updated_at = ?
                     WHERE user_id = ? AND rec_type = ? AND title = ?
                       AND status = 'active';
                    """,
                    (stamp, rec.user_id, rec.rec_type, rec.title),
                )
                result.expired_count += cursor.rowcount
                result.inserted_ids.append(self.insert(rec))

        logger.debug(
            "Superseded %d and inserted %d recommendation(s).",
            result.expired_count, len(result.inserted_ids),
        )
        return result

    def get(self, rec_id: int) -> Optional[ActiveRecommendation]:
        row = self.fetchone(
            "SELECT * FROM active_recommendations WHERE rec_id = ?;", (rec_id,)
        )
        return _row_to_recommendation(row) if row else None

    def list_for_user(
        self,
        user_id: str,
        status: Optional[RecommendationStatus] = RecommendationStatus.ACTIVE,
        limit: Optional[int] = None,
    ) -> list[ActiveRecommendation]:
        """Recommendations for one user, best score first.

        Args:
            user_id: Owner.
            status: Filter; ``None`` returns every status.
            limit: Maximum rows; ``None`` for all.
        """
        sql = "SELECT * FROM active_recommendations WHERE user_id = ?"
        params: list = [user_id]
        if status is not None:
            sql += " AND status = ?"
            params.append(str(status))
        sql += " ORDER BY score DESC, rec_id ASC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        rows = self.fetchall(sql + ";", tuple(params))
        return [_row_to_recommendation(r) for r in rows]

    def count_active(self, user_id: str, rec_type: str, title: str) -> int:
        """Number of active rows for one identity (0 or 1 when healthy)."""
        row = self.fetchone(
            """
            SELECT COUNT(*) AS n FROM active_recommendations
            WHERE user_id = ? AND rec_type = ? AND title = ? AND status = 'active';
            """,
            (user_id, rec_type, title),
        )
        return int(row["n"]) if row else 0

    def transition(
        self,
        rec_id: int,
        target: RecommendationStatus,
        at: Optional[datetime] = None,
    ) -> ActiveRecommendation:
        """Move a recommendation along its lifecycle graph (compare-and-swap).

        Raises:
            ValueError: If no such recommendation exists.
            InvalidTransition: If the move is not allowed from the stored status.
        """
        current = self.get(rec_id)
        if current is None:
            raise ValueError(f"Recommendation {rec_id} not found.")

        updated = transition_recommendation(current, target, at)
        cursor = self.execute(
            """
            UPDATE active_recommendations
               SET status = ?, updated_at = ?
             WHERE rec_id = ? AND status = ?;
            """,
            (str(updated.status), to_db(updated.updated_at), rec_id, str(current.status)),
        )
        if cursor.rowcount == 0:
            latest = self.get(rec_id)
            stored = latest.status if latest else current.status
            raise InvalidTransition("recommendation", stored, target)

        logger.info("Recommendation %d: %s → %s", rec_id, current.status, updated.status)
        return updated

    def expire_stale(self, now: Optional[datetime] = None, user_id: Optional[str] = None) -> int:
        """Expire active rows whose ``expires_at`` is at or before ``now``.

        Args:
            now: Cut-off time (UTC); defaults to now.
            user_id: Restrict to one user; ``None`` for everyone.

        Returns:
            Number of rows expired.
        """
        stamp = to_db(now or utcnow())
        sql = """
            UPDATE active_recommendations
               SET status = 'expired', updated_at = ?
             WHERE status = 'active' AND expires_at <= ?
        """
        params: list = [stamp, stamp]
        if user_id is not None:
            sql += " AND user_id = ?"
            params.append(user_id)
        cursor = self.execute(sql + ";", tuple(params))
        return cursor.rowcount


# ── Private helpers ────────────────────────────────────────────────────────────

def _row_to_recommendation(row: sqlite3.Row) -> ActiveRecommendation:
    return ActiveRecommendation(
        rec_id=row["rec_id"],
        user_id=row["user_id"],
        rec_type=row["rec_type"],
        title=row["title"],
        description=row["description"],
        base_priority=row["base_priority"],
        complexity=row["complexity"],
        applicable_industries=frozenset(json.loads(row["applicable_industries"])),
        applicable_business_sizes=frozenset(json.loads(row["applicable_business_sizes"])),
        focus_area=row["focus_area"],
        hook=row["hook"],
        expected_impact=row["expected_impact"],
        time_to_implement=row["time_to_implement"],
        reasoning=row["reasoning"],
        score=row["score"],
        score_components=json.loads(row["score_components"]) if row["score_components"] else {},
        status=row["status"],
        created_at=from_db(row["created_at"]),
        expires_at=from_db(row["expires_at"]),
        updated_at=from_db(row["updated_at"]),
        run_slug=row["run_slug"],
    )
