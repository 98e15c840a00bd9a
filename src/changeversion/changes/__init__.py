"""Change detection for ChangeVersion."""

from .detector import BEGINNING_OF_TIME, ChangeDetector

__all__ = ["BEGINNING_OF_TIME", "ChangeDetector"]
