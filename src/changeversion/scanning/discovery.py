"""Working tree discovery and on-demand file probes."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, Iterator, Protocol

from changeversion.ignore import IgnoreRule, should_ignore

LOGGER = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _utc(timestamp: float) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def from_ns(value: int) -> datetime:
    """Convert a nanosecond POSIX timestamp to a UTC datetime, truncating to microseconds."""
    return _EPOCH + timedelta(microseconds=value // 1000)


def to_ns(moment: datetime) -> int:
    """Convert a timezone-aware datetime to a nanosecond POSIX timestamp."""
    delta = moment - _EPOCH
    return ((delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds) * 1000


class FileProbe(Protocol):
    """Reads per-file attributes the change detector only needs for changed paths."""

    def creation_time(self, path: str) -> datetime | None:
        """Return the creation time of ``path`` or None when unavailable."""

    def size(self, path: str) -> int:
        """Return the size of ``path`` in bytes."""


class FilesystemProbe:
    """Probe backed by ``os.stat`` relative to a repository root.

    Creation time comes from ``st_birthtime``. Platforms that do not report it
    yield None, which disables move and recreate detection.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def creation_time(self, path: str) -> datetime | None:
        stat = (self.root / path).stat()
        birthtime_ns = getattr(stat, "st_birthtime_ns", None)
        if birthtime_ns is not None:
            return from_ns(birthtime_ns)
        birthtime = getattr(stat, "st_birthtime", None)
        if birthtime is None:
            return None
        return _utc(birthtime)

    def size(self, path: str) -> int:
        return (self.root / path).stat().st_size


class WorkingTreeScanner:
    """Discover tracked files under a repository root."""

    def __init__(
        self,
        root: Path,
        *,
        control_dirname: str,
        rules: Iterable[IgnoreRule] = (),
    ) -> None:
        self.root = root
        self.control_dirname = control_dirname
        self.rules = list(rules)

    def scan(self) -> dict[str, datetime]:
        """Return the actual state: relative path to last-modified time (UTC).

        Raises:
            OSError: If a directory or file cannot be read during the walk.
        """
        entries: dict[str, datetime] = {}
        for relative, path in self._iter_files():
            if should_ignore(self.rules, relative):
                LOGGER.debug("Ignoring %s", relative)
                continue
            entries[relative] = from_ns(path.stat().st_mtime_ns)
        LOGGER.debug("Scanned %d file(s) under %s", len(entries), self.root)
        return dict(sorted(entries.items()))

    def _iter_files(self) -> Iterator[tuple[str, Path]]:
        """Internal helper yielding (relative path, absolute path) for regular files."""
        pending = [self.root]
        while pending:
            current = pending.pop()
            with os.scandir(current) as iterator:
                for entry in iterator:
                    if entry.is_dir(follow_symlinks=False):
                        if current == self.root and entry.name == self.control_dirname:
                            continue
                        pending.append(Path(entry.path))
                    elif entry.is_file(follow_symlinks=False):
                        path = Path(entry.path)
                        relative = path.relative_to(self.root).as_posix()
                        yield relative, path


__all__ = ["FileProbe", "FilesystemProbe", "WorkingTreeScanner", "from_ns", "to_ns"]
