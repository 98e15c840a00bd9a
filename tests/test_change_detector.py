"""Tests for change classification."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from changeversion.changes import ChangeDetector
from changeversion.history import (
    DeletedFile,
    MovedFile,
    NewFile,
    RecreatedFile,
    TrackedFile,
    UpdatedFile,
)

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
BORN = datetime(2023, 6, 1, tzinfo=timezone.utc)


class FakeProbe:
    """In-memory probe mapping paths to creation times and sizes."""

    def __init__(
        self,
        creation: dict[str, datetime | None] | None = None,
        sizes: dict[str, int] | None = None,
    ) -> None:
        self.creation = creation or {}
        self.sizes = sizes or {}
        self.calls: list[str] = []

    def creation_time(self, path: str) -> datetime | None:
        self.calls.append(path)
        return self.creation.get(path)

    def size(self, path: str) -> int:
        return self.sizes.get(path, 0)


def test_identical_states_produce_no_changes() -> None:
    probe = FakeProbe()
    latest = {"a.txt": TrackedFile(update_time=T0, creation_time=BORN)}

    changes = ChangeDetector(probe).detect(latest, {"a.txt": T0}, T0)

    assert changes.is_empty
    assert probe.calls == []


def test_older_mtime_is_not_an_update() -> None:
    latest = {"a.txt": TrackedFile(update_time=T0)}

    changes = ChangeDetector(FakeProbe()).detect(latest, {"a.txt": T0 - timedelta(hours=1)}, T0)

    assert changes.is_empty


def test_untracked_file_is_new() -> None:
    probe = FakeProbe(creation={"a.txt": BORN}, sizes={"a.txt": 12})

    changes = ChangeDetector(probe).detect({}, {"a.txt": T0})

    assert changes.new == [NewFile(path="a.txt", created_at=BORN, update_time=T0, size=12)]
    assert changes.counts() == {"new": 1, "updated": 0, "moved": 0, "deleted": 0}


def test_newer_mtime_with_same_creation_is_update() -> None:
    probe = FakeProbe(creation={"a.txt": BORN}, sizes={"a.txt": 3})
    latest = {"a.txt": TrackedFile(update_time=T0, creation_time=BORN)}
    later = T0 + timedelta(minutes=5)

    changes = ChangeDetector(probe).detect(latest, {"a.txt": later}, T0)

    assert changes.updated == [UpdatedFile(path="a.txt", update_time=later, size=3)]
    assert not changes.deleted and not changes.new


def test_newer_mtime_with_new_creation_is_delete_then_recreate() -> None:
    reborn = BORN + timedelta(days=30)
    probe = FakeProbe(creation={"a.txt": reborn})
    latest = {"a.txt": TrackedFile(update_time=T0, creation_time=BORN)}
    later = T0 + timedelta(minutes=5)

    changes = ChangeDetector(probe).detect(latest, {"a.txt": later}, T0)

    ordered = changes.ordered()
    assert [type(change) for change in ordered] == [DeletedFile, RecreatedFile]
    assert ordered[0].path == ordered[1].path == "a.txt"
    assert ordered[1].created_at == reborn


def test_renamed_file_is_single_move() -> None:
    probe = FakeProbe(creation={"new.txt": BORN}, sizes={"new.txt": 7})
    latest = {"old.txt": TrackedFile(update_time=T0, creation_time=BORN)}
    last_commit = T0 + timedelta(hours=1)

    changes = ChangeDetector(probe).detect(latest, {"new.txt": T0}, last_commit)

    assert changes.moved == [
        MovedFile(old_path="old.txt", new_path="new.txt", update_time=T0, size=7)
    ]
    assert not changes.new and not changes.deleted


def test_move_requires_creation_before_last_commit() -> None:
    probe = FakeProbe(creation={"new.txt": BORN})
    latest = {"old.txt": TrackedFile(update_time=T0, creation_time=BORN)}
    last_commit = BORN - timedelta(days=1)

    changes = ChangeDetector(probe).detect(latest, {"new.txt": T0}, last_commit)

    assert [change.path for change in changes.new] == ["new.txt"]
    assert [change.path for change in changes.deleted] == ["old.txt"]
    assert not changes.moved


def test_missing_creation_time_degrades_to_delete_and_new() -> None:
    probe = FakeProbe()
    latest = {"old.txt": TrackedFile(update_time=T0)}

    changes = ChangeDetector(probe).detect(latest, {"new.txt": T0}, T0 + timedelta(hours=1))

    assert not changes.moved
    assert [change.path for change in changes.new] == ["new.txt"]
    assert [change.path for change in changes.deleted] == ["old.txt"]


def test_deletions_use_last_commit_time() -> None:
    latest = {"gone.txt": TrackedFile(update_time=T0)}
    last_commit = T0 + timedelta(hours=2)

    changes = ChangeDetector(FakeProbe()).detect(latest, {}, last_commit)

    assert changes.deleted == [DeletedFile(path="gone.txt", update_time=last_commit)]


def test_deletions_without_prior_commit_use_now() -> None:
    latest = {"gone.txt": TrackedFile(update_time=T0)}
    now = T0 + timedelta(days=1)

    changes = ChangeDetector(FakeProbe()).detect(latest, {}, None, now=now)

    assert changes.deleted[0].update_time == now


def test_latest_state_is_not_mutated() -> None:
    latest = {
        "a.txt": TrackedFile(update_time=T0, creation_time=BORN),
        "b.txt": TrackedFile(update_time=T0),
    }
    snapshot = dict(latest)
    probe = FakeProbe(creation={"c.txt": BORN})

    ChangeDetector(probe).detect(latest, {"c.txt": T0}, T0 + timedelta(hours=1))

    assert latest == snapshot
