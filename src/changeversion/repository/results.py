"""Outcome models returned by repository operations."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Literal

from pydantic import BaseModel, Field

from changeversion.history.models import Changelist, Commit

PreconditionCode = Literal[
    "missing_repo",
    "repo_exists",
    "empty_commit_declined",
    "missing_remote_log",
]


class Precondition(BaseModel):
    """A recoverable precondition failure; the operation did nothing.

    Attributes:
        code: Machine-readable identifier.
        message: Human-readable explanation.
    """

    code: PreconditionCode
    message: str


class InitResult(BaseModel):
    """Result of initializing a repository."""

    root: Path
    control_dir: Path


class StatusReport(BaseModel):
    """Pending changes between the working tree and the last commit."""

    root: Path
    changes: Changelist
    tracked_count: int = 0

    @property
    def counts(self) -> dict[str, int]:
        return self.changes.counts()


class ListingReport(BaseModel):
    """Tracked paths plus pending changes."""

    root: Path
    tracked: List[str] = Field(default_factory=list)
    changes: Changelist = Field(default_factory=Changelist)


class CommitResult(BaseModel):
    """Result of recording a commit."""

    index: int
    commit: Commit

    @property
    def change_count(self) -> int:
        return len(self.commit.changes)


class LogEntry(BaseModel):
    """One line of the commit history."""

    index: int
    time: datetime
    message: str
    change_count: int


class LogReport(BaseModel):
    """All commits, oldest first."""

    entries: List[LogEntry] = Field(default_factory=list)


__all__ = [
    "PreconditionCode",
    "Precondition",
    "InitResult",
    "StatusReport",
    "ListingReport",
    "CommitResult",
    "LogEntry",
    "LogReport",
]
