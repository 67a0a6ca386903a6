"""
Abstract base class for all pipeline stages.

Every stage follows the same contract:
  1. Receive ``AppConfig`` at construction.
  2. ``run(**kwargs)`` is the sole public API.
  3. ``run()`` creates a ``RunMetadata`` record, calls ``_execute()``,
     and persists the run record with final status.
  4. ``_execute()`` is the stage-specific implementation.

Stages never swallow exceptions: a failing ``_execute()`` is recorded as
``failed`` (with the message) and then re-raised to the caller.

Usage::

    class MyStage(PipelineStage):
        stage_name = "expire"

        def _execute(self, run: RunMetadata, **kwargs) -> int:
            return 3

    stage = MyStage(config=app_config)
    run = stage.run(user_id="user-1")
"""

from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Generator
from uuid import uuid4

from clarity_engine.config import AppConfig
from clarity_engine.db.connection import connect_from_config
from clarity_engine.models.meta import RunMetadata
from clarity_engine.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


class PipelineStage(ABC):
    """Abstract base for all pipeline stages.

    Subclasses must:
      1. Set ``stage_name`` class variable.
      2. Implement ``_execute(run, **kwargs) -> int``.

    Attributes:
        stage_name: String identifier matching a valid ``RunMetadata.pipeline_stage``.
        config: The application configuration for this run.
        db_path: Path to the SQLite database (defaults to ``config.database.db_path``).
    """

    stage_name: str

    def __init__(
        self,
        config: AppConfig,
        db_path: str | None = None,
    ) -> None:
        self.config = config
        self.db_path = db_path or config.database.db_path

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Open a connection to this stage's database."""
        with connect_from_config(self.config.database, db_path=self.db_path) as conn:
            yield conn

    def run(self, user_id: str | None = None, **kwargs) -> RunMetadata:
        """Execute this pipeline stage.

        Args:
            user_id: User the run is for; recorded on the run and passed
                through to ``_execute()``. ``None`` for global runs.
            **kwargs: Stage-specific keyword arguments passed to ``_execute()``.

        Returns:
            ``RunMetadata`` with final ``status``, ``rows_processed``,
            and ``finished_at`` set.

        Raises:
            Exception: Re-raises any exception from ``_execute()`` after
                recording ``status='failed'`` in the run record.
        """
        run = RunMetadata(
            run_slug=str(uuid4()),
            pipeline_stage=self.stage_name,
            user_id=user_id,
            config_snapshot=self.config.model_dump(mode="json"),
            started_at=utcnow(),
        )
        logger.info(
            "Stage [%s] starting | user_id=%s | run_slug=%s",
            self.stage_name, user_id, run.run_slug,
        )

        try:
            rows = self._execute(run=run, user_id=user_id, **kwargs)
            run.status = "success"
            run.rows_processed = rows
            run.finished_at = utcnow()
            logger.info(
                "Stage [%s] completed | rows=%d | run_slug=%s",
                self.stage_name, rows, run.run_slug,
            )

        except Exception as exc:
            run.status = "failed"
            run.error_message = str(exc)
            run.finished_at = utcnow()
            logger.error(
                "Stage [%s] FAILED: %s | run_slug=%s",
                self.stage_name, exc, run.run_slug,
            )
            self._persist_run(run)
            raise

        self._persist_run(run)
        return run

    @abstractmethod
    def _execute(self, run: RunMetadata, **kwargs) -> int:
        """Stage-specific implementation.

        Args:
            run: The in-progress ``RunMetadata`` record (mutable).
            **kwargs: Stage-specific parameters (always includes ``user_id``).

        Returns:
            Integer count of rows/records written or updated.
        """
        ...

    def _persist_run(self, run: RunMetadata) -> None:
        """Write or update the run record.

        Errors are logged, not raised, so a persistence problem never masks
        the stage's own outcome or exception.
        """
        from clarity_engine.db.repositories.run_repo import RunMetadataRepository

        try:
            with self.connection() as conn:
                repo = RunMetadataRepository(conn)
                if run.run_id is None:
                    run.run_id = repo.insert_run(run)
                else:
                    repo.update_run(run)
        except sqlite3.Error as exc:
            logger.error(
                "Failed to persist RunMetadata for run_slug=%s: %s",
                run.run_slug, exc,
            )
