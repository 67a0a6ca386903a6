"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      - committed static defaults
  2. ``config/local.toml``        - optional local overrides (gitignored)
  3. ``.env``                     - local secrets and env overrides (gitignored)
  4. Environment variables        - ``CLARITY_ENGINE_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

Pipeline stages and CLI commands receive an ``AppConfig`` instance. The pure
scoring and selection functions receive only the sub-config they need
(``ScoringConfig``, ``SelectionConfig``), never the whole tree.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class DatabaseConfig(BaseModel):
    """SQLite database connection settings."""

    model_config = ConfigDict(frozen=True)

    db_path: str = "data/db/clarity_engine.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/clarity_engine.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class ScoringConfig(BaseModel):
    """Additive scoring weights for recommendation candidates.

    The chaos thresholds are compared against the 0–10 chaos indicator on the
    business profile: strictly above ``high_chaos_threshold`` rewards simple
    actions, strictly below ``low_chaos_threshold`` rewards advanced ones.
    """

    model_config = ConfigDict(frozen=True)

    high_priority_weight: float = 10.0
    medium_priority_weight: float = 5.0
    low_priority_weight: float = 2.0
    high_chaos_threshold: float = 7.0
    low_chaos_threshold: float = 4.0
    complexity_bonus: float = 5.0
    industry_match_bonus: float = 3.0
    size_match_bonus: float = 2.0

    @model_validator(mode="after")
    def validate_thresholds(self) -> "ScoringConfig":
        if self.low_chaos_threshold > self.high_chaos_threshold:
            raise ValueError(
                f"low_chaos_threshold ({self.low_chaos_threshold}) must be <= "
                f"high_chaos_threshold ({self.high_chaos_threshold})."
            )
        return self


class SelectionConfig(BaseModel):
    """Per-frequency caps on the number of recommendations kept per pass.

    ``None`` means unbounded.
    """

    model_config = ConfigDict(frozen=True)

    hourly_cap: Optional[int] = 7
    daily_cap: Optional[int] = 7
    weekly_cap: Optional[int] = 15
    monthly_cap: Optional[int] = None

    @field_validator("hourly_cap", "daily_cap", "weekly_cap", "monthly_cap")
    @classmethod
    def validate_cap(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError(f"Selection caps must be non-negative, got {v}.")
        return v


class LifecycleConfig(BaseModel):
    """Expiry and follow-up windows for persisted records."""

    model_config = ConfigDict(frozen=True)

    recommendation_ttl_days: int = 30
    opportunity_follow_up_days: int = 7

    @field_validator("recommendation_ttl_days", "opportunity_follow_up_days")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Lifecycle windows must be >= 1 day, got {v}.")
        return v


class AppConfig(BaseModel):
    """Complete application configuration - the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env.
    """

    model_config = ConfigDict(frozen=True)

    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    scoring: ScoringConfig = ScoringConfig()
    selection: SelectionConfig = SelectionConfig()
    lifecycle: LifecycleConfig = LifecycleConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config explicitly."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)

    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply CLARITY_ENGINE_* env vars to the raw config dict.

    Supported overrides:
      CLARITY_ENGINE_DB_PATH    → raw["database"]["db_path"]
      CLARITY_ENGINE_LOG_LEVEL  → raw["logging"]["level"]
      CLARITY_ENGINE_DEBUG      → raw["debug"]
    """
    if db_path := os.environ.get("CLARITY_ENGINE_DB_PATH"):
        raw.setdefault("database", {})["db_path"] = db_path

    if log_level := os.environ.get("CLARITY_ENGINE_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("CLARITY_ENGINE_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        database=DatabaseConfig(**raw.get("database", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        scoring=ScoringConfig(**raw.get("scoring", {})),
        selection=SelectionConfig(**raw.get("selection", {})),
        lifecycle=LifecycleConfig(**raw.get("lifecycle", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
