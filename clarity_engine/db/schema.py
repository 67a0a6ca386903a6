"""
SQLite schema DDL for the lifecycle store.

All statements use ``IF NOT EXISTS`` so ``apply_schema()`` is idempotent.

Table creation order respects foreign key dependencies:
  1. run_metadata            (no FKs)
  2. opportunities           (no FKs)
  3. active_recommendations  (no FKs; run_slug is informational)
  4. engagement_events       (→ active_recommendations)

The partial unique index ``uq_active_rec_identity`` allows only one
``active`` row per ``(user_id, rec_type, title)``. Terminal rows are not
covered, so history accumulates freely.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

# ── DDL statements ─────────────────────────────────────────────────────────────

_DDL_RUN_METADATA = """
CREATE TABLE IF NOT EXISTS run_metadata (
    run_id          INTEGER PRIMARY KEY AUTOINCREMENT,
    run_slug        TEXT    NOT NULL UNIQUE,
    pipeline_stage  TEXT    NOT NULL,
    status          TEXT    NOT NULL DEFAULT 'started',
    user_id         TEXT,
    config_snapshot TEXT    NOT NULL,
    rows_processed  INTEGER NOT NULL DEFAULT 0,
    error_message   TEXT,
    started_at      TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
    finished_at     TEXT
);
"""

_DDL_OPPORTUNITIES = """
CREATE TABLE IF NOT EXISTS opportunities (
    opportunity_id    INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id           TEXT    NOT NULL,
    title             TEXT    NOT NULL,
    source_signal     TEXT    NOT NULL,
    estimated_value   INTEGER,
    priority          TEXT    NOT NULL CHECK (priority IN ('high', 'medium', 'low')),
    status            TEXT    NOT NULL DEFAULT 'pending'
                      CHECK (status IN ('pending', 'contacted', 'converted', 'dismissed')),
    summary           TEXT    NOT NULL DEFAULT '',
    follow_up_actions TEXT    NOT NULL DEFAULT '[]',
    created_at        TEXT    NOT NULL,
    last_action_at    TEXT,
    follow_up_date    TEXT
);
"""

_DDL_OPPORTUNITIES_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_opportunities_user_status
    ON opportunities(user_id, status, created_at DESC);
"""

_DDL_ACTIVE_RECOMMENDATIONS = """
CREATE TABLE IF NOT EXISTS active_recommendations (
    rec_id                    INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id                   TEXT    NOT NULL,
    rec_type                  TEXT    NOT NULL,
    title                     TEXT    NOT NULL,
    description               TEXT    NOT NULL,
    base_priority             TEXT    NOT NULL,
    complexity                TEXT    NOT NULL,
    applicable_industries     TEXT    NOT NULL DEFAULT '[]',
    applicable_business_sizes TEXT    NOT NULL DEFAULT '[]',
    focus_area                TEXT,
    hook                      TEXT,
    expected_impact           TEXT,
    time_to_implement         TEXT,
    reasoning                 TEXT,
    score                     REAL    NOT NULL DEFAULT 0.0,
    score_components          TEXT,
    status                    TEXT    NOT NULL DEFAULT 'active'
                              CHECK (status IN ('active', 'implemented', 'dismissed', 'expired')),
    created_at                TEXT    NOT NULL,
    expires_at                TEXT    NOT NULL,
    updated_at                TEXT,
    run_slug                  TEXT
);
"""

_DDL_ACTIVE_RECOMMENDATIONS_INDEXES = """
CREATE UNIQUE INDEX IF NOT EXISTS uq_active_rec_identity
    ON active_recommendations(user_id, rec_type, title)
    WHERE status = 'active';
CREATE INDEX IF NOT EXISTS idx_active_rec_user_status
    ON active_recommendations(user_id, status, score DESC);
CREATE INDEX IF NOT EXISTS idx_active_rec_expiry
    ON active_recommendations(expires_at)
    WHERE status = 'active';
"""

_DDL_ENGAGEMENT_EVENTS = """
CREATE TABLE IF NOT EXISTS engagement_events (
    event_id           INTEGER PRIMARY KEY AUTOINCREMENT,
    recommendation_id  INTEGER NOT NULL REFERENCES active_recommendations(rec_id),
    user_id            TEXT    NOT NULL,
    action             TEXT    NOT NULL CHECK (action IN ('implemented', 'dismissed', 'rated')),
    rating             INTEGER CHECK (rating IS NULL OR rating BETWEEN 1 AND 5),
    time_spent_seconds REAL    NOT NULL DEFAULT 0.0,
    occurred_at        TEXT    NOT NULL
);
"""

_DDL_ENGAGEMENT_EVENTS_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_engagement_user_time
    ON engagement_events(user_id, occurred_at);
CREATE INDEX IF NOT EXISTS idx_engagement_rec
    ON engagement_events(recommendation_id);
"""

# ── Ordered list of all DDL to apply ──────────────────────────────────────────

_ALL_DDL: list[str] = [
    _DDL_RUN_METADATA,
    _DDL_OPPORTUNITIES,
    _DDL_OPPORTUNITIES_INDEXES,
    _DDL_ACTIVE_RECOMMENDATIONS,
    _DDL_ACTIVE_RECOMMENDATIONS_INDEXES,
    _DDL_ENGAGEMENT_EVENTS,
    _DDL_ENGAGEMENT_EVENTS_INDEXES,
]

# Table names for introspection / tests
ALL_TABLE_NAMES = [
    "run_metadata",
    "opportunities",
    "active_recommendations",
    "engagement_events",
]


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply all DDL statements to ``conn``.

    Idempotent - safe to call on an already-initialized database.

    Args:
        conn: An open ``sqlite3.Connection`` (FK enforcement should be ON).
    """
    logger.debug("Applying schema to database...")

    for ddl in _ALL_DDL:
        for statement in _split_ddl(ddl):
            conn.execute(statement)

    conn.commit()
    logger.info("Schema applied: %d tables, indexes created/verified.", len(ALL_TABLE_NAMES))


def _split_ddl(ddl: str) -> list[str]:
    """Split a multi-statement DDL block on semicolons."""
    return [s.strip() for s in ddl.split(";") if s.strip()]


def get_existing_tables(conn: sqlite3.Connection) -> list[str]:
    """Return table names present in the database, sorted."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;"
    ).fetchall()
    return [row["name"] for row in rows]


def get_existing_indexes(conn: sqlite3.Connection) -> list[str]:
    """Return index names present in the database, sorted."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='index' ORDER BY name;"
    ).fetchall()
    return [row["name"] for row in rows]
