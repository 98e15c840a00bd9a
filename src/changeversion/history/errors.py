"""Commit log errors."""


class StorageError(Exception):
    """Base exception for commit log persistence."""


class MissingLogError(StorageError):
    """Raised when no commit log file exists."""


class ReplayError(StorageError):
    """Raised when a commit log cannot be replayed consistently."""
