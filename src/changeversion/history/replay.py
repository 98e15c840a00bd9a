"""Fold a commit log into the latest tracked state."""

from __future__ import annotations

from typing import Iterable, Mapping

from .errors import ReplayError
from .models import (
    Commit,
    DeletedFile,
    FileChange,
    LatestState,
    MovedFile,
    NewFile,
    RecreatedFile,
    TrackedFile,
    UpdatedFile,
)


def apply_change(state: LatestState, change: FileChange) -> None:
    """Apply one change to ``state`` in place.

    Raises:
        ReplayError: If an update or move refers to a path that is not tracked.
    """

    if isinstance(change, (NewFile, RecreatedFile)):
        state[change.path] = TrackedFile(
            update_time=change.update_time, creation_time=change.created_at
        )
    elif isinstance(change, UpdatedFile):
        current = state.get(change.path)
        if current is None:
            raise ReplayError(f"Update recorded for untracked path {change.path!r}")
        state[change.path] = TrackedFile(
            update_time=change.update_time, creation_time=current.creation_time
        )
    elif isinstance(change, DeletedFile):
        state.pop(change.path, None)
    elif isinstance(change, MovedFile):
        current = state.get(change.old_path)
        if current is None:
            raise ReplayError(f"Move recorded from untracked path {change.old_path!r}")
        state[change.new_path] = TrackedFile(
            update_time=change.update_time, creation_time=current.creation_time
        )
        state.pop(change.old_path, None)
    else:  # pragma: no cover - the union is closed
        raise ReplayError(f"Unknown change type {type(change).__name__}")


def apply_commit(state: Mapping[str, TrackedFile], commit: Commit) -> LatestState:
    """Return a new state with ``commit`` applied on top of ``state``."""
    result: LatestState = dict(state)
    for change in commit.changes:
        apply_change(result, change)
    return result


def replay(commits: Iterable[Commit]) -> LatestState:
    """Replay ``commits`` in order, starting from an empty state."""
    state: LatestState = {}
    for commit in commits:
        for change in commit.changes:
            apply_change(state, change)
    return state


__all__ = ["apply_change", "apply_commit", "replay"]
