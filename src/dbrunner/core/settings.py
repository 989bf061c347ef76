"""Runner settings loaded from the environment.

``RunnerSettings`` holds the construction-time knobs of an
``AsyncQueryRunner``: worker pool size and naming, whether parameter
metadata is checked before binding, and logging options.

Examples:
    >>> from dbrunner.core.settings import RunnerSettings
    >>> settings = RunnerSettings(max_workers=8)
    >>> runner = AsyncQueryRunner.from_settings(settings, SqliteDataSource("app.db"))

Environment variables use the ``DBRUNNER_`` prefix (``DBRUNNER_MAX_WORKERS=8``)
and may also come from a ``.env`` file.

Tags:
    settings, configuration, pydantic, environment, dbrunner

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from dbrunner.core.logging import configure_logging


class RunnerSettings(BaseSettings):
    """Settings for the async query runner.

    Fields
    ──────
    max_workers          : Fixed worker pool size
    thread_name_prefix   : Name prefix for worker threads
    validate_parameters  : Check placeholder count before binding
    log_level            : Structlog log level
    log_json             : JSON logs (True), console (False), auto (None)
    """

    model_config = SettingsConfigDict(
        env_prefix="DBRUNNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Worker pool ──────────────────────────────────────────────
    max_workers: int = Field(default=4, ge=1, description="Fixed worker pool size")
    thread_name_prefix: str = "dbrunner"

    # ── Binding ──────────────────────────────────────────────────
    validate_parameters: bool = Field(
        default=True,
        description="Compare supplied values with the declared placeholder count before binding",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None

    def configure_logging(self, service: str = "dbrunner") -> None:
        """Apply ``log_level`` and ``log_json`` to structlog."""
        configure_logging(level=self.log_level, json_format=self.log_json, service=service)
