"""Commit log data models."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_pascal


class HistoryModel(BaseModel):
    """Shared configuration for persisted history models.

    Field names are serialized in PascalCase; models are immutable once built.
    """

    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )


class NewFile(HistoryModel):
    """A path that was not tracked before.

    Attributes:
        path: Repository-relative path using forward slashes.
        created_at: Filesystem creation time, when the platform reports one.
        update_time: Last modification time.
        size: File size in bytes.
    """

    kind: Literal["New"] = "New"
    path: str
    created_at: Optional[datetime] = None
    update_time: datetime
    size: int = 0


class UpdatedFile(HistoryModel):
    """A tracked path whose modification time advanced."""

    kind: Literal["Updated"] = "Updated"
    path: str
    update_time: datetime
    size: int = 0


class DeletedFile(HistoryModel):
    """A tracked path that no longer exists (or whose old incarnation was replaced)."""

    kind: Literal["Deleted"] = "Deleted"
    path: str
    update_time: datetime


class MovedFile(HistoryModel):
    """A tracked file observed under a new path.

    Attributes:
        old_path: Path the file was tracked under.
        new_path: Path the file now lives at.
        update_time: Last modification time at the new path.
        size: File size in bytes.
    """

    kind: Literal["Moved"] = "Moved"
    old_path: str
    new_path: str
    update_time: datetime
    size: int = 0


class RecreatedFile(HistoryModel):
    """A new file created at the path of a file deleted in the same commit."""

    kind: Literal["Recreated"] = "Recreated"
    path: str
    created_at: Optional[datetime] = None
    update_time: datetime
    size: int = 0


FileChange = Annotated[
    Union[NewFile, UpdatedFile, DeletedFile, MovedFile, RecreatedFile],
    Field(discriminator="kind"),
]


class Commit(HistoryModel):
    """An immutable batch of classified changes."""

    changes: List[FileChange] = Field(default_factory=list)
    message: str = ""
    time: datetime


class CommitLog(HistoryModel):
    """Ordered sequence of commits; the only persisted repository artifact."""

    commits: List[Commit] = Field(default_factory=list)

    @property
    def last_commit_time(self) -> Optional[datetime]:
        """Return the timestamp of the most recent commit, if any."""
        return self.commits[-1].time if self.commits else None

    def append(self, commit: Commit) -> "CommitLog":
        """Return a new log with ``commit`` appended."""
        return CommitLog(commits=[*self.commits, commit])


class TrackedFile(BaseModel):
    """Replayed record for a tracked path.

    Attributes:
        update_time: Last recorded modification time.
        creation_time: Creation time first observed for this incarnation.
    """

    model_config = ConfigDict(frozen=True)

    update_time: datetime
    creation_time: Optional[datetime] = None


LatestState = dict[str, TrackedFile]


class Changelist(BaseModel):
    """Uncommitted changes grouped by kind.

    The ``new`` group also holds :class:`RecreatedFile` entries.
    """

    deleted: List[DeletedFile] = Field(default_factory=list)
    updated: List[UpdatedFile] = Field(default_factory=list)
    moved: List[MovedFile] = Field(default_factory=list)
    new: List[Union[NewFile, RecreatedFile]] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """Return True when no change was detected."""
        return not (self.deleted or self.updated or self.moved or self.new)

    def ordered(self) -> list[FileChange]:
        """Return all changes in commit order: Deleted, Updated, Moved, New.

        Recreated entries live in the New group so they always follow the
        Deleted entry recorded for the same path.
        """
        return [*self.deleted, *self.updated, *self.moved, *self.new]

    def counts(self) -> dict[str, int]:
        """Return the number of changes per group."""
        return {
            "new": len(self.new),
            "updated": len(self.updated),
            "moved": len(self.moved),
            "deleted": len(self.deleted),
        }


__all__ = [
    "HistoryModel",
    "NewFile",
    "UpdatedFile",
    "DeletedFile",
    "MovedFile",
    "RecreatedFile",
    "FileChange",
    "Commit",
    "CommitLog",
    "TrackedFile",
    "LatestState",
    "Changelist",
]
