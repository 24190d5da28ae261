"""Git-related models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class RepositoryCommitState(StrEnum):
    """Drift classification produced by the commit monitor on each poll."""

    NO_CHANGES = "NO_CHANGES"
    ONE_NEW_COMMIT = "ONE_NEW_COMMIT"
    MULTIPLE_CHANGED_COMMITS = "MULTIPLE_CHANGED_COMMITS"


class CommitInfo(BaseModel):
    """A single commit in the graph."""

    hash: str
    parents: list[str] = Field(default_factory=list)
    message: str
    author: str
    date: str

    @property
    def short_hash(self) -> str:
        return self.hash[:8]

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1


class StoredCommit(CommitInfo):
    """A history-branch commit together with its note text."""

    note: str = ""


class MonitorSnapshot(BaseModel):
    """What the commit monitor saw on its last poll."""

    branch: str
    head: str | None = None
    heads: dict[str, str] = Field(default_factory=dict)


class InstallResult(BaseModel):
    """Readiness state returned by ``install()``."""

    success: bool
    history_branch: str
    head: str | None = None
    created_repository: bool = False
    created_initial_commit: bool = False
    committed_pending_changes: bool = False
    created_history_branch: bool = False


class UndoStatus(StrEnum):
    """Outcome of an undo attempt."""

    SUCCESS = "success"
    NOTHING_TO_UNDO = "nothing_to_undo"
    NOTHING_TO_REVERT = "nothing_to_revert"
    MERGE_COMMIT = "merge_commit"


class UndoResult(BaseModel):
    """Result of ``undo_last_change()``."""

    status: UndoStatus
    message: str
    commit: str | None = None
    revert_commit: str | None = None

    @property
    def success(self) -> bool:
        return self.status is UndoStatus.SUCCESS


class ResetResult(BaseModel):
    """Result of a full history reset."""

    success: bool
    message: str
    commits_removed: int = 0
