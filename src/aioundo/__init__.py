"""aioundo — per-operation undo for git working trees, backed by a history branch."""

from ._version import __version__
from .exceptions import (
    CheckoutConflictError,
    CherryPickError,
    ConfigError,
    GitError,
    GitNotInitializedError,
    HistoryNotInstalledError,
    InstallError,
    MultipleParentsNotAllowedError,
    NothingToCommitError,
    RefAlreadyExistsError,
    RefNotFoundError,
    RevertConflictError,
    UndoError,
    UnknownCommitStateError,
)
from .git import GitBackend, RepositoryCommitsMonitor
from .models import (
    CommitInfo,
    InstallResult,
    MonitorSnapshot,
    RepositoryCommitState,
    ResetResult,
    StoredCommit,
    UndoConfig,
    UndoResult,
    UndoStatus,
)
from .settings import load_undo_config
from .undo import UndoEngine, UndoManager

__all__ = [
    "CheckoutConflictError",
    "CherryPickError",
    "CommitInfo",
    "ConfigError",
    "GitBackend",
    "GitError",
    "GitNotInitializedError",
    "HistoryNotInstalledError",
    "InstallError",
    "InstallResult",
    "MonitorSnapshot",
    "MultipleParentsNotAllowedError",
    "NothingToCommitError",
    "RefAlreadyExistsError",
    "RefNotFoundError",
    "RepositoryCommitState",
    "RepositoryCommitsMonitor",
    "ResetResult",
    "RevertConflictError",
    "StoredCommit",
    "UndoConfig",
    "UndoEngine",
    "UndoError",
    "UndoManager",
    "UndoResult",
    "UndoStatus",
    "UnknownCommitStateError",
    "__version__",
    "load_undo_config",
]
