"""Pydantic models for aioundo."""

from .config import UndoConfig
from .git import (
    CommitInfo,
    InstallResult,
    MonitorSnapshot,
    RepositoryCommitState,
    ResetResult,
    StoredCommit,
    UndoResult,
    UndoStatus,
)

__all__ = [
    "CommitInfo",
    "InstallResult",
    "MonitorSnapshot",
    "RepositoryCommitState",
    "ResetResult",
    "StoredCommit",
    "UndoConfig",
    "UndoResult",
    "UndoStatus",
]
