"""Remote file store synchronization for ChangeVersion."""

from .client import AuthenticationError, RemoteError, RemoteStore
from .sync import PullReport, PushReport, pull, push

__all__ = [
    "AuthenticationError",
    "PullReport",
    "PushReport",
    "RemoteError",
    "RemoteStore",
    "pull",
    "push",
]
