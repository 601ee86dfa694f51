"""Application configuration models.

These live in ``config.json`` under the platform config directory and describe
how the CLI runs (where data lives, how fast saves are debounced). User-facing
settings such as the base monthly hours are ``AppSettings`` and go through the
storage backend instead.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class StorageConfig(BaseModel):
    """Storage configuration."""

    data_dir: str | None = Field(
        default=None, description="Directory holding projects/time entries JSON"
    )


class SyncConfig(BaseModel):
    """Persistence debounce configuration."""

    debounce_seconds: float = Field(default=1.0, ge=0.0, le=30.0)


class OutputConfig(BaseModel):
    """Output configuration."""

    format: str = Field(default="table")
    color: bool = Field(default=True)


class AppConfig(BaseModel):
    """Main Worklog configuration."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
