"""Note vocabulary and commit message conventions for the history branch."""

from __future__ import annotations

from ..models.config import DEFAULT_HISTORY_BRANCH_NAME, HISTORY_BRANCH_CONFIG_KEY

# Operation recorded but not yet attributed to a working branch
DEFAULT_NOTE = "*WT"
# Operation has been undone; the commit stays on the history branch
DELETED_COMMIT_NOTE = "*DELETED"

INITIAL_COMMIT_MSG = "repository initial commit"
UNDO_INSTALL_COMMIT_MSG = "FORGE PLUGIN-UNDO: initial commit"
UNDO_PREPARE_COMMIT_MSG = "FORGE PLUGIN-UNDO: preparing to undo a change"
UNDO_STORE_COMMIT_MSG_PREFIX = "history-branch: changes introduced by the "

__all__ = [
    "DEFAULT_HISTORY_BRANCH_NAME",
    "DEFAULT_NOTE",
    "DELETED_COMMIT_NOTE",
    "HISTORY_BRANCH_CONFIG_KEY",
    "INITIAL_COMMIT_MSG",
    "UNDO_INSTALL_COMMIT_MSG",
    "UNDO_PREPARE_COMMIT_MSG",
    "UNDO_STORE_COMMIT_MSG_PREFIX",
    "history_commit_message",
]


def history_commit_message(operation_name: str) -> str:
    """Return the history-branch commit message for *operation_name*."""
    return f'{UNDO_STORE_COMMIT_MSG_PREFIX}"{operation_name}"'
