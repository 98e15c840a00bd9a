"""Filesystem scanning for ChangeVersion."""

from .discovery import FileProbe, FilesystemProbe, WorkingTreeScanner, from_ns, to_ns

__all__ = ["FileProbe", "FilesystemProbe", "WorkingTreeScanner", "from_ns", "to_ns"]
