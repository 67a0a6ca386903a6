"""
Tests for clarity_engine/config.py.

What we test
------------
load_config():
  - Loads a TOML file into AppConfig with typed sections.
  - A sibling local.toml is deep-merged over it.
  - CLARITY_ENGINE_* environment variables override both.
  - Missing file raises FileNotFoundError.
  - Omitted sections fall back to model defaults (monthly cap unbounded).

Validators:
  - Log level uppercased and checked.
  - Chaos thresholds must satisfy low <= high.
  - Negative caps and non-positive lifecycle windows rejected.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from clarity_engine.config import (
    AppConfig,
    LifecycleConfig,
    LoggingConfig,
    ScoringConfig,
    SelectionConfig,
    _deep_merge,
    load_config,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("CLARITY_ENGINE_DB_PATH", "CLARITY_ENGINE_LOG_LEVEL", "CLARITY_ENGINE_DEBUG"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "default.toml"
    path.write_text(
        "[project]\n"
        "debug = false\n"
        "\n"
        "[database]\n"
        'db_path = "data/test.db"\n'
        "\n"
        "[logging]\n"
        'level = "info"\n'
        "\n"
        "[scoring]\n"
        "high_priority_weight = 12.0\n"
        "\n"
        "[selection]\n"
        "daily_cap = 5\n",
        encoding="utf-8",
    )
    return path


class TestLoadConfig:
    def test_loads_sections(self, config_file):
        config = load_config(config_file)
        assert isinstance(config, AppConfig)
        assert config.database.db_path == "data/test.db"
        assert config.logging.level == "INFO"
        assert config.scoring.high_priority_weight == 12.0
        assert config.scoring.medium_priority_weight == 5.0
        assert config.selection.daily_cap == 5
        assert config.selection.monthly_cap is None
        assert config.lifecycle.recommendation_ttl_days == 30
        assert config.debug is False

    def test_local_override_merged(self, config_file):
        (config_file.parent / "local.toml").write_text(
            "[selection]\nweekly_cap = 3\n", encoding="utf-8"
        )
        config = load_config(config_file)
        assert config.selection.weekly_cap == 3
        assert config.selection.daily_cap == 5

    def test_env_overrides(self, config_file, monkeypatch):
        monkeypatch.setenv("CLARITY_ENGINE_DB_PATH", "/tmp/override.db")
        monkeypatch.setenv("CLARITY_ENGINE_LOG_LEVEL", "debug")
        monkeypatch.setenv("CLARITY_ENGINE_DEBUG", "true")
        config = load_config(config_file)
        assert config.database.db_path == "/tmp/override.db"
        assert config.logging.level == "DEBUG"
        assert config.debug is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.toml")

    def test_invalid_values_raise(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[selection]\nhourly_cap = -1\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_config(path)

    def test_bundled_default_loads(self):
        config = load_config()
        assert config.scoring == ScoringConfig()
        assert config.selection == SelectionConfig()


class TestDeepMerge:
    def test_nested(self):
        merged = _deep_merge({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}, "c": 4})
        assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}


class TestValidators:
    def test_log_level(self):
        assert LoggingConfig(level="warning").level == "WARNING"
        with pytest.raises(ValidationError):
            LoggingConfig(level="LOUD")

    def test_thresholds_ordered(self):
        with pytest.raises(ValidationError):
            ScoringConfig(low_chaos_threshold=8, high_chaos_threshold=7)
        assert ScoringConfig(low_chaos_threshold=5, high_chaos_threshold=5)

    def test_negative_cap(self):
        with pytest.raises(ValidationError):
            SelectionConfig(weekly_cap=-2)

    def test_lifecycle_windows(self):
        with pytest.raises(ValidationError):
            LifecycleConfig(recommendation_ttl_days=0)

    def test_frozen(self):
        with pytest.raises(ValidationError):
            AppConfig().debug = True
