"""Commit log persistence for ChangeVersion."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import yaml
from pydantic import ValidationError

from .errors import MissingLogError, ReplayError, StorageError
from .models import (
    Changelist,
    Commit,
    CommitLog,
    DeletedFile,
    FileChange,
    LatestState,
    MovedFile,
    NewFile,
    RecreatedFile,
    TrackedFile,
    UpdatedFile,
)
from .replay import apply_change, apply_commit, replay

LOGGER = logging.getLogger(__name__)


class CommitLogStore:
    """Load and save the commit log as YAML."""

    def __init__(self, log_path: Path) -> None:
        """Initialize the store.

        Args:
            log_path: Location of the commit log file.
        """
        self._log_path = log_path

    @property
    def log_path(self) -> Path:
        """Return the path of the commit log file."""
        return self._log_path

    def exists(self) -> bool:
        """Return True when the commit log file is present."""
        return self._log_path.is_file()

    def load(self) -> CommitLog:
        """Load the commit log.

        Returns:
            CommitLog: Deserialized commit log.

        Raises:
            MissingLogError: If the log file does not exist.
            StorageError: If the stored data cannot be parsed.
        """
        if not self._log_path.is_file():
            raise MissingLogError(f"No commit log found at {self._log_path}")

        log = self.parse(self._log_path.read_text(encoding="utf-8"), source=str(self._log_path))
        LOGGER.debug("Loaded %d commit(s) from %s", len(log.commits), self._log_path)
        return log

    @staticmethod
    def parse(text: str, *, source: str = "<string>") -> CommitLog:
        """Deserialize commit log YAML.

        Args:
            text: Serialized commit log.
            source: Description of where the text came from, for error messages.

        Raises:
            StorageError: If the text is not a valid commit log.
        """
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise StorageError(f"Invalid commit log data in {source}: {exc}") from exc

        if data is None:
            raise StorageError(f"Commit log in {source} is empty")
        try:
            return CommitLog.model_validate(data)
        except ValidationError as exc:
            raise StorageError(f"Invalid commit log structure in {source}: {exc}") from exc

    def save(self, log: CommitLog) -> None:
        """Persist ``log``, replacing the previous file atomically.

        Args:
            log: Commit log to serialize.
        """
        payload = log.model_dump(mode="json", by_alias=True)
        text = yaml.safe_dump(payload, sort_keys=False, allow_unicode=True)
        directory = self._log_path.parent
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self._log_path.name}.", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._log_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        LOGGER.debug("Saved %d commit(s) to %s", len(log.commits), self._log_path)


__all__ = [
    "CommitLogStore",
    "Changelist",
    "Commit",
    "CommitLog",
    "DeletedFile",
    "FileChange",
    "LatestState",
    "MissingLogError",
    "MovedFile",
    "NewFile",
    "RecreatedFile",
    "ReplayError",
    "StorageError",
    "TrackedFile",
    "UpdatedFile",
    "apply_change",
    "apply_commit",
    "replay",
]
