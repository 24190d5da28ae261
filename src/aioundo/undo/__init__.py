"""Undo engine and its async facade."""

from .engine import UndoEngine
from .manager import UndoManager

__all__ = [
    "UndoEngine",
    "UndoManager",
]
