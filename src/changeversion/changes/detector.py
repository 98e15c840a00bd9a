"""Classify differences between the working tree and the replayed log."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Mapping

from changeversion.history.models import (
    Changelist,
    DeletedFile,
    MovedFile,
    NewFile,
    RecreatedFile,
    TrackedFile,
    UpdatedFile,
)
from changeversion.scanning import FileProbe

LOGGER = logging.getLogger(__name__)

BEGINNING_OF_TIME = datetime.min.replace(tzinfo=timezone.utc)


class ChangeDetector:
    """Compare actual and latest state to produce a :class:`Changelist`.

    Moves and recreations are inferred from filesystem creation times: a new
    path whose creation time equals that of a vanished tracked path is a move,
    and a tracked path whose creation time changed was deleted and recreated.
    This is a heuristic, not a content identity check. When the probe reports
    no creation time, moves surface as Deleted + New and rewrites as Updated.
    """

    def __init__(self, probe: FileProbe) -> None:
        self.probe = probe

    def detect(
        self,
        latest: Mapping[str, TrackedFile],
        actual: Mapping[str, datetime],
        last_commit_time: datetime | None = None,
        *,
        now: datetime | None = None,
    ) -> Changelist:
        """Compute the changelist.

        Args:
            latest: Replayed state of the commit log. Not mutated.
            actual: Scanned working tree, path to last-modified time.
            last_commit_time: Time of the most recent commit, None if there is none.
            now: Timestamp for deletions when there is no prior commit.

        Returns:
            Changelist: Classified changes.
        """

        baseline = last_commit_time or BEGINNING_OF_TIME
        remaining: dict[str, TrackedFile] = dict(latest)
        changes = Changelist()

        for path, update_time in actual.items():
            recorded = remaining.get(path)
            if recorded is None:
                self._classify_untracked(path, update_time, baseline, remaining, changes)
                continue

            if update_time > recorded.update_time:
                creation_time = self.probe.creation_time(path)
                size = self.probe.size(path)
                if creation_time != recorded.creation_time:
                    changes.deleted.append(DeletedFile(path=path, update_time=update_time))
                    changes.new.append(
                        RecreatedFile(
                            path=path,
                            created_at=creation_time,
                            update_time=update_time,
                            size=size,
                        )
                    )
                else:
                    changes.updated.append(
                        UpdatedFile(path=path, update_time=update_time, size=size)
                    )
            del remaining[path]

        if remaining:
            deleted_at = last_commit_time or now or datetime.now(timezone.utc)
            for path in remaining:
                changes.deleted.append(DeletedFile(path=path, update_time=deleted_at))

        LOGGER.debug("Detected changes: %s", changes.counts())
        return changes

    def _classify_untracked(
        self,
        path: str,
        update_time: datetime,
        baseline: datetime,
        remaining: dict[str, TrackedFile],
        changes: Changelist,
    ) -> None:
        creation_time = self.probe.creation_time(path)
        size = self.probe.size(path)
        if creation_time is not None and creation_time < baseline:
            source = next(
                (key for key, record in remaining.items() if record.creation_time == creation_time),
                None,
            )
            if source is not None:
                changes.moved.append(
                    MovedFile(
                        old_path=source,
                        new_path=path,
                        update_time=update_time,
                        size=size,
                    )
                )
                del remaining[source]
                return
        changes.new.append(
            NewFile(path=path, created_at=creation_time, update_time=update_time, size=size)
        )


__all__ = ["BEGINNING_OF_TIME", "ChangeDetector"]
