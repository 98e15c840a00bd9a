"""Commit log persistence tests."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest
import yaml

from changeversion.history import (
    Commit,
    CommitLog,
    CommitLogStore,
    DeletedFile,
    MissingLogError,
    MovedFile,
    NewFile,
    StorageError,
)

T0 = datetime(2024, 4, 2, 9, 15, 30, 250000, tzinfo=timezone.utc)


def _log() -> CommitLog:
    first = Commit(
        message="first",
        time=T0,
        changes=[NewFile(path="a.txt", created_at=T0, update_time=T0, size=4)],
    )
    second = Commit(
        message="second",
        time=T0,
        changes=[
            DeletedFile(path="b.txt", update_time=T0),
            MovedFile(old_path="a.txt", new_path="c.txt", update_time=T0, size=4),
        ],
    )
    return CommitLog(commits=[first, second])


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    store = CommitLogStore(tmp_path / "versions")

    store.save(_log())
    loaded = store.load()

    assert loaded.model_dump() == _log().model_dump()
    assert loaded.last_commit_time == T0


def test_saved_log_uses_pascal_case_fields(tmp_path: Path) -> None:
    store = CommitLogStore(tmp_path / "versions")
    store.save(_log())

    data = yaml.safe_load(store.log_path.read_text(encoding="utf-8"))

    assert list(data) == ["Commits"]
    commit = data["Commits"][1]
    assert set(commit) == {"Changes", "Message", "Time"}
    assert commit["Changes"][1]["Kind"] == "Moved"
    assert commit["Changes"][1]["OldPath"] == "a.txt"
    assert "UpdateTime" in commit["Changes"][0]


def test_save_leaves_no_temporary_files(tmp_path: Path) -> None:
    store = CommitLogStore(tmp_path / "versions")

    store.save(CommitLog())
    store.save(_log())

    assert [path.name for path in tmp_path.iterdir()] == ["versions"]


def test_parse_accepts_handwritten_yaml() -> None:
    text = """
Commits:
- Changes:
  - Kind: New
    Path: notes.txt
    UpdateTime: '2024-01-01T00:00:00Z'
  Message: hello
  Time: '2024-01-01T00:00:05Z'
"""
    log = CommitLogStore.parse(text)

    assert log.commits[0].message == "hello"
    assert log.commits[0].changes[0].model_dump() == NewFile(
        path="notes.txt", update_time=datetime(2024, 1, 1, tzinfo=timezone.utc)
    ).model_dump()


def test_empty_log_has_no_commit_time() -> None:
    assert CommitLog().last_commit_time is None


def test_append_returns_new_log() -> None:
    log = CommitLog()
    commit = Commit(message="x", time=T0)

    appended = log.append(commit)

    assert log.commits == []
    assert appended.commits == [commit]


def test_load_missing_log_raises(tmp_path: Path) -> None:
    store = CommitLogStore(tmp_path / "versions")

    assert store.exists() is False
    with pytest.raises(MissingLogError):
        store.load()


@pytest.mark.parametrize(
    "text",
    [
        "Commits: [unterminated",
        "",
        "Commits:\n- Changes:\n  - Kind: Teleported\n    Path: a\n  Time: '2024-01-01T00:00:00Z'\n",
        "Commits: []\nExtra: 1\n",
    ],
)
def test_load_invalid_log_raises(tmp_path: Path, text: str) -> None:
    path = tmp_path / "versions"
    path.write_text(text, encoding="utf-8")

    with pytest.raises(StorageError):
        CommitLogStore(path).load()
