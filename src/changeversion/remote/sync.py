"""Push committed state to, and pull it from, a remote file store."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field

from changeversion.history import Changelist, CommitLogStore, RecreatedFile, replay
from changeversion.repository import Repository
from changeversion.repository.results import Precondition
from changeversion.scanning import to_ns

from .client import RemoteError, RemoteStore

LOGGER = logging.getLogger(__name__)


class PushReport(BaseModel):
    """Outcome of a push.

    Attributes:
        uploaded: Tracked paths uploaded.
        deleted: Remote paths removed because they are no longer tracked.
        skipped: Tracked paths missing from the working tree or holding
            uncommitted edits.
        pending_changes: Uncommitted changes that were not pushed.
    """

    uploaded: List[str] = Field(default_factory=list)
    deleted: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)
    pending_changes: int = 0


class PullReport(BaseModel):
    """Outcome of a pull.

    Attributes:
        commits: Number of commits in the pulled log.
        downloaded: Tracked paths written to the working tree.
        missing: Tracked paths the remote store did not have.
    """

    commits: int = 0
    downloaded: List[str] = Field(default_factory=list)
    missing: List[str] = Field(default_factory=list)


def push(repository: Repository, remote: RemoteStore) -> PushReport | Precondition:
    """Upload the committed state and the commit log.

    Only committed content is pushed; uncommitted changes are counted in the report
    and tracked files with uncommitted edits are skipped.
    """

    status = repository.status()
    if isinstance(status, Precondition):
        return status
    context = repository.context
    latest = repository.latest_state()
    report = PushReport(pending_changes=sum(status.counts.values()))

    dirty = _uncommitted_paths(status.changes)
    for path in sorted(latest):
        local = context.root / path
        if path in dirty or not local.is_file():
            report.skipped.append(path)
            continue
        remote.upload(path, local.read_bytes())
        report.uploaded.append(path)

    remote.upload(context.log_relative_path, context.log_path.read_bytes())

    for path in remote.list_files():
        if path == context.log_relative_path or path in latest:
            continue
        if remote.delete(path):
            report.deleted.append(path)

    LOGGER.info(
        "Pushed %d file(s), deleted %d remote file(s)", len(report.uploaded), len(report.deleted)
    )
    return report


def pull(repository: Repository, remote: RemoteStore) -> PullReport | Precondition:
    """Download the remote commit log and every file it tracks.

    The control folder is created when missing. Downloaded files get their
    recorded modification time so a following status reports no changes.
    """

    context = repository.context
    raw = remote.download(context.log_relative_path)
    if raw is None:
        return Precondition(
            code="missing_remote_log", message="The remote store holds no commit log."
        )
    log = CommitLogStore.parse(raw.decode("utf-8"), source=f"remote {context.log_relative_path}")
    latest = replay(log.commits)
    targets = {
        path: _resolve_target(context.root, context.control_dirname, path) for path in latest
    }

    context.control_dir.mkdir(parents=True, exist_ok=True)
    repository.store.save(log)

    report = PullReport(commits=len(log.commits))
    for path, record in sorted(latest.items()):
        target = targets[path]
        content = remote.download(path)
        if content is None:
            report.missing.append(path)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        stamp = to_ns(record.update_time)
        os.utime(target, ns=(stamp, stamp))
        report.downloaded.append(path)

    LOGGER.info("Pulled %d commit(s) and %d file(s)", report.commits, len(report.downloaded))
    return report


def _uncommitted_paths(changes: Changelist) -> set[str]:
    """Tracked paths whose working copy differs from the committed state."""

    dirty = {change.path for change in changes.updated}
    dirty.update(change.path for change in changes.deleted)
    dirty.update(change.old_path for change in changes.moved)
    dirty.update(change.path for change in changes.new if isinstance(change, RecreatedFile))
    return dirty


def _resolve_target(root: Path, control_dirname: str, path: str) -> Path:
    base = root.resolve()
    target = (base / path).resolve()
    try:
        relative = target.relative_to(base)
    except ValueError as exc:
        raise RemoteError(f"Refusing to write {path!r} outside the repository root") from exc
    if relative.parts and relative.parts[0] == control_dirname:
        raise RemoteError(f"Refusing to overwrite control folder entry {path!r}")
    return target


__all__ = ["PullReport", "PushReport", "pull", "push"]
