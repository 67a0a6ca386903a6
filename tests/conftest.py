"""
Shared pytest fixtures for the clarity engine test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the full
    schema applied. Created anew for each test that requests it.
  - ``db_file`` / ``app_config``: An on-disk database under ``tmp_path`` and
    an ``AppConfig`` pointing at it, for pipeline stages that open their own
    connections.
  - Sample profile, preferences and timestamps used across modules.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

import pytest

from clarity_engine.config import AppConfig, DatabaseConfig, LoggingConfig
from clarity_engine.db.connection import get_connection
from clarity_engine.db.schema import apply_schema
from clarity_engine.models.profile import BusinessProfile, PriceRange, UserPreferences
from clarity_engine.taxonomy.recommendation_taxonomy import Complexity, Frequency

FIXED_NOW = datetime(2025, 3, 3, 9, 0, 0, tzinfo=timezone.utc)


# ── Database fixtures ─────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the full schema applied.

    Foreign key enforcement is ON. Connection is closed after the test.
    """
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    apply_schema(conn)
    yield conn
    conn.close()


@pytest.fixture
def db_file(tmp_path: Path) -> str:
    """Path to an on-disk database with the schema applied."""
    path = str(tmp_path / "clarity_test.db")
    with get_connection(path) as conn:
        apply_schema(conn)
    return path


@pytest.fixture
def app_config(db_file: str) -> AppConfig:
    """Default ``AppConfig`` pointing at ``db_file``, with no log file."""
    return AppConfig(
        database=DatabaseConfig(db_path=db_file),
        logging=LoggingConfig(level="WARNING", log_file=""),
    )


# ── Sample domain objects ─────────────────────────────────────────────────────

@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def plumbing_profile() -> BusinessProfile:
    """An overwhelmed small plumbing business with known pricing."""
    return BusinessProfile(
        industry="Plumbing",
        business_size="small",
        chaos_indicator=8.0,
        price_range=PriceRange(min=1000, max=5000),
        services=["Drain Cleaning", "Water Heater Installation"],
    )


@pytest.fixture
def daily_preferences() -> UserPreferences:
    return UserPreferences(
        frequency=Frequency.DAILY,
        focus_areas=frozenset({"Revenue Growth", "Financial Health"}),
        complexity_tolerance=Complexity.SIMPLE,
    )
