"""Configuration models describing ChangeVersion settings."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class CvBaseModel(BaseModel):
    """Shared configuration for ChangeVersion Pydantic settings models."""

    model_config = ConfigDict(extra="forbid")


class RepositorySettings(CvBaseModel):
    """Names of the on-disk artifacts that make up a repository.

    Attributes:
        control_dirname: Name of the control folder created at the repository root.
        ignore_filename: Name of the ignore file read from the repository root.
        log_filename: Name of the commit log file inside the control folder.
    """

    control_dirname: str = ".cv"
    ignore_filename: str = ".cvignore"
    log_filename: str = "versions"


class CommitSettings(CvBaseModel):
    """Commit behavior defaults.

    Attributes:
        empty_commit: Policy applied when a commit has no changes. ``prompt`` asks
            for confirmation, ``allow`` records the empty commit, ``reject`` aborts.
    """

    empty_commit: Literal["prompt", "allow", "reject"] = "prompt"


class RemoteSettings(CvBaseModel):
    """Settings for the remote file store used by push and pull.

    Attributes:
        api_key_header: HTTP header that carries the pre-shared API key.
        timeout_seconds: Per-request timeout.
    """

    api_key_header: str = "X-Api-Key"
    timeout_seconds: float = 30.0


class LoggingSettings(CvBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
        file_logging: Whether to write a rotating log inside the control folder.
    """

    level: str = "WARNING"
    max_size_mb: int = 5
    backup_count: int = 3
    file_logging: bool = True


class CLIOptions(CvBaseModel):
    """CLI presentation preferences.

    Attributes:
        show_timestamps: Whether status output includes modification times.
        quiet_default: Whether commands suppress non-error output by default.
    """

    show_timestamps: bool = True
    quiet_default: bool = False


class CvConfig(CvBaseModel):
    """Top-level configuration struct for ChangeVersion.

    Attributes:
        repository: Repository artifact names.
        commit: Commit behavior.
        remote: Remote file store settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    repository: RepositorySettings = Field(default_factory=RepositorySettings)
    commit: CommitSettings = Field(default_factory=CommitSettings)
    remote: RemoteSettings = Field(default_factory=RemoteSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "CvBaseModel",
    "RepositorySettings",
    "CommitSettings",
    "RemoteSettings",
    "LoggingSettings",
    "CLIOptions",
    "CvConfig",
]
