"""Explicit repository location and naming context."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from changeversion.config.models import RepositorySettings


@dataclass(frozen=True, slots=True)
class RepositoryContext:
    """Where a repository lives and how its artifacts are named.

    Attributes:
        root: Absolute root of the working tree.
        control_dirname: Name of the control folder at the root.
        ignore_filename: Name of the ignore file at the root.
        log_filename: Name of the commit log inside the control folder.
    """

    root: Path
    control_dirname: str = ".cv"
    ignore_filename: str = ".cvignore"
    log_filename: str = "versions"

    @classmethod
    def from_settings(cls, root: Path, settings: RepositorySettings) -> "RepositoryContext":
        """Build a context for ``root`` from configured artifact names."""
        return cls(
            root=root.expanduser().resolve(),
            control_dirname=settings.control_dirname,
            ignore_filename=settings.ignore_filename,
            log_filename=settings.log_filename,
        )

    @property
    def control_dir(self) -> Path:
        return self.root / self.control_dirname

    @property
    def log_path(self) -> Path:
        return self.control_dir / self.log_filename

    @property
    def ignore_path(self) -> Path:
        return self.root / self.ignore_filename

    @property
    def log_relative_path(self) -> str:
        """Return the commit log location relative to the root, with forward slashes."""
        return f"{self.control_dirname}/{self.log_filename}"

    def is_initialized(self) -> bool:
        """Return True when the control folder exists."""
        return self.control_dir.is_dir()


__all__ = ["RepositoryContext"]
