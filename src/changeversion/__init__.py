"""ChangeVersion: minimal version control over file metadata."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("changeversion")
except PackageNotFoundError:  # source checkout without installed metadata
    __version__ = "0.0.0"

__all__ = ["__version__"]
