"""Repository facade orchestrating scanning, replay, and change detection."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from changeversion.changes import ChangeDetector
from changeversion.history import Changelist, Commit, CommitLog, CommitLogStore, LatestState, replay
from changeversion.ignore import read_ignore_rules
from changeversion.scanning import FileProbe, FilesystemProbe, WorkingTreeScanner

from .context import RepositoryContext
from .results import (
    CommitResult,
    InitResult,
    ListingReport,
    LogEntry,
    LogReport,
    Precondition,
    StatusReport,
)

LOGGER = logging.getLogger(__name__)

MISSING_REPO_MESSAGE = "No repo exists at current location"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Repository:
    """Entry point for repository operations on a single working tree.

    Precondition failures are returned as :class:`Precondition` values. Corrupt
    or missing logs and filesystem errors propagate as exceptions.
    """

    def __init__(
        self,
        context: RepositoryContext,
        *,
        store: CommitLogStore | None = None,
        probe: FileProbe | None = None,
        clock: Callable[[], datetime] = _now,
    ) -> None:
        self.context = context
        self.store = store or CommitLogStore(context.log_path)
        self.probe = probe or FilesystemProbe(context.root)
        self._clock = clock

    # Operations -------------------------------------------------------

    def init(self) -> InitResult | Precondition:
        """Create the control folder and an empty commit log."""
        if self.context.control_dir.exists():
            return Precondition(
                code="repo_exists", message="A CV repo already exists at this location."
            )
        self.context.control_dir.mkdir(parents=True)
        self.store.save(CommitLog())
        LOGGER.info("Initialized repository at %s", self.context.root)
        return InitResult(root=self.context.root, control_dir=self.context.control_dir)

    def status(self) -> StatusReport | Precondition:
        """Report pending changes without modifying anything."""
        missing = self._require_repo()
        if missing is not None:
            return missing
        log = self.store.load()
        latest = replay(log.commits)
        changes = self._detect(log, latest)
        return StatusReport(root=self.context.root, changes=changes, tracked_count=len(latest))

    def list_files(self) -> ListingReport | Precondition:
        """Report tracked paths (sorted) and pending changes."""
        missing = self._require_repo()
        if missing is not None:
            return missing
        log = self.store.load()
        latest = replay(log.commits)
        changes = self._detect(log, latest)
        return ListingReport(root=self.context.root, tracked=sorted(latest), changes=changes)

    def commit(
        self,
        message: str,
        *,
        confirm_empty: Callable[[], bool] = lambda: False,
    ) -> CommitResult | Precondition:
        """Append the pending changes as a new commit.

        Args:
            message: Commit message.
            confirm_empty: Called when there are no changes; returning False aborts.

        Returns:
            CommitResult | Precondition: The recorded commit or why nothing happened.
        """
        missing = self._require_repo()
        if missing is not None:
            return missing
        log = self.store.load()
        changes = self._detect(log, replay(log.commits))
        if changes.is_empty and not confirm_empty():
            return Precondition(code="empty_commit_declined", message="Empty commit aborted.")

        commit = Commit(changes=changes.ordered(), message=message, time=self._clock())
        self.store.save(log.append(commit))
        LOGGER.info("Recorded commit %d with %d change(s)", len(log.commits), len(commit.changes))
        return CommitResult(index=len(log.commits), commit=commit)

    def log(self) -> LogReport | Precondition:
        """List every commit with its index, time, and message."""
        missing = self._require_repo()
        if missing is not None:
            return missing
        log = self.store.load()
        return LogReport(
            entries=[
                LogEntry(
                    index=index,
                    time=commit.time,
                    message=commit.message,
                    change_count=len(commit.changes),
                )
                for index, commit in enumerate(log.commits)
            ]
        )

    # Helpers ----------------------------------------------------------

    def latest_state(self) -> LatestState:
        """Replay the persisted commit log."""
        return replay(self.store.load().commits)

    def scan(self) -> dict[str, datetime]:
        """Return the actual state of the working tree."""
        rules = read_ignore_rules(self.context.ignore_path)
        scanner = WorkingTreeScanner(
            self.context.root, control_dirname=self.context.control_dirname, rules=rules
        )
        return scanner.scan()

    def _detect(self, log: CommitLog, latest: LatestState) -> Changelist:
        detector = ChangeDetector(self.probe)
        return detector.detect(latest, self.scan(), log.last_commit_time, now=self._clock())

    def _require_repo(self) -> Precondition | None:
        if self.context.is_initialized():
            return None
        return Precondition(code="missing_repo", message=MISSING_REPO_MESSAGE)


__all__ = ["MISSING_REPO_MESSAGE", "Repository", "RepositoryContext"]
