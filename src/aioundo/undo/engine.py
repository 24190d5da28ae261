"""Per-operation undo on top of a parallel history branch.

Every tracked operation is mirrored as one commit on the history branch and
annotated with a git note.  Undoing an operation reverts its history commit,
carries the inverse diff over to the working branch and flags the history
commit as deleted.  The commits themselves are never removed except by a
full :meth:`UndoEngine.reset`.

All methods here are synchronous; :class:`aioundo.undo.manager.UndoManager`
wraps them for asyncio callers.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from itertools import islice
from pathlib import Path

from ..exceptions import (
    CherryPickError,
    HistoryNotInstalledError,
    InstallError,
    MultipleParentsNotAllowedError,
    UndoError,
    UnknownCommitStateError,
)
from ..git.backend import GitBackend
from ..git.monitor import RepositoryCommitsMonitor
from ..models.config import UndoConfig
from ..models.git import (
    CommitInfo,
    InstallResult,
    RepositoryCommitState,
    ResetResult,
    StoredCommit,
    UndoResult,
    UndoStatus,
)
from .notes import (
    DEFAULT_NOTE,
    DELETED_COMMIT_NOTE,
    INITIAL_COMMIT_MSG,
    UNDO_INSTALL_COMMIT_MSG,
    UNDO_PREPARE_COMMIT_MSG,
    history_commit_message,
)

logger = logging.getLogger(__name__)


class UndoEngine:
    """Keeps the history branch in step with the working branch and undoes operations.

    ``history_size`` counts the commits appended to the history branch since
    the last full reset and bounds every walk of that branch.
    """

    def __init__(
        self,
        project_root: Path,
        config: UndoConfig | None = None,
        *,
        backend: GitBackend | None = None,
    ) -> None:
        self.project_root = project_root.resolve()
        self.config = config or UndoConfig()
        self.backend = backend or GitBackend(
            self.project_root,
            author_name=self.config.author_name,
            author_email=self.config.author_email,
        )
        self.history_size = 0
        self.commits_monitor = RepositoryCommitsMonitor()

    # ------------------------------------------------------------------
    # Install
    # ------------------------------------------------------------------

    def install(self) -> InstallResult:
        """Bootstrap the repository and the history branch.

        Safe to call more than once; an existing history branch is reused.
        """
        branch_name = self.get_undo_branch_name()
        created_repository = False
        try:
            if not self.backend.exists():
                self.backend.init()
                created_repository = True
            else:
                self.backend.ensure_identity()

            created_initial_commit = self._ensure_repository_is_initialized()
            pending = self.backend.stage_all_and_commit(
                UNDO_INSTALL_COMMIT_MSG, allow_clean=True
            )
            created_branch = self._initialize_history_branch(branch_name)

            self.commits_monitor.set_undo_branch_name(branch_name)
            self._rebaseline_monitor()
            head = self.backend.head_of(branch_name)
        except (UndoError, OSError) as exc:
            raise InstallError(f"Failed to install the history branch: {exc}") from exc

        logger.info("History branch %s ready at %s", branch_name, head)
        return InstallResult(
            success=True,
            history_branch=branch_name,
            head=head,
            created_repository=created_repository,
            created_initial_commit=created_initial_commit,
            committed_pending_changes=pending is not None,
            created_history_branch=created_branch,
        )

    def is_installed(self) -> bool:
        """Return ``True`` if the history branch exists.  Never mutates anything."""
        if not self.backend.exists():
            return False
        return self.backend.branch_exists(self.get_undo_branch_name())

    def _ensure_repository_is_initialized(self) -> bool:
        if self.backend.list_branches():
            return False
        ignore_file = self.project_root / self.config.ignore_file
        ignore_file.touch(exist_ok=True)
        self.backend.commit_paths([self.config.ignore_file], INITIAL_COMMIT_MSG)
        logger.info("Created initial commit in %s", self.project_root)
        return True

    def _initialize_history_branch(self, branch_name: str) -> bool:
        if self.backend.branch_exists(branch_name):
            logger.debug("History branch %s already exists", branch_name)
            return False
        self.backend.create_branch(branch_name)
        return True

    def _rebaseline_monitor(self) -> None:
        self.commits_monitor.reset()
        self.commits_monitor.update_commit_counters(self.backend)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_undo_branch_name(self) -> str:
        return self.config.history_branch_name

    def get_undo_branch_ref(self) -> str | None:
        """Return the commit id the history branch points at."""
        return self.backend.head_of(self.get_undo_branch_name())

    def increase_history_size_by_one(self) -> None:
        self.history_size += 1

    def get_commit_monitor_branch_with_one_new_commit(self) -> str | None:
        return self.commits_monitor.branch_with_one_new_commit

    # ------------------------------------------------------------------
    # Recording operations
    # ------------------------------------------------------------------

    def record_operation(self, operation_name: str) -> CommitInfo | None:
        """Mirror the current uncommitted changes onto the history branch.

        The working tree is left as it was.  Returns the new history commit,
        or ``None`` if there was nothing to record.
        """
        backend = self.backend
        branch_name = self.get_undo_branch_name()
        if not backend.branch_exists(branch_name):
            raise HistoryNotInstalledError(f"History branch {branch_name} does not exist")
        if backend.is_clean():
            logger.debug("Nothing to record for %s", operation_name)
            return None

        # New files must be tracked so the stash merges cleanly onto a
        # history branch that may already contain them.
        backend.stage_all()
        backend.stash_push(f"aioundo: {operation_name}")
        try:
            with backend.on_branch(branch_name):
                try:
                    backend.stash_apply()
                    recorded = backend.stage_all_and_commit(
                        history_commit_message(operation_name), allow_clean=True
                    )
                    if recorded is not None:
                        backend.set_note(recorded.hash, DEFAULT_NOTE)
                except UndoError:
                    backend.discard_changes()
                    raise
        finally:
            backend.stash_apply(index=True)
            backend.stash_drop()

        if recorded is None:
            logger.debug("History branch already holds the changes of %s", operation_name)
            return None

        self.increase_history_size_by_one()
        logger.info("Recorded %s as %s", operation_name, recorded.short_hash)
        return recorded

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def check_and_update_repository_for_new_commits(self) -> RepositoryCommitState:
        state = self.commits_monitor.update_commit_counters(self.backend)

        if state is RepositoryCommitState.NO_CHANGES:
            pass
        elif state is RepositoryCommitState.ONE_NEW_COMMIT:
            branch = self.get_commit_monitor_branch_with_one_new_commit()
            self.change_working_tree_notes_to(branch)
        elif state is RepositoryCommitState.MULTIPLE_CHANGED_COMMITS:
            self.reset()
        else:
            raise UnknownCommitStateError(f"Unknown RepositoryCommitState: {state}")

        return state

    def change_working_tree_notes_to(self, branch: str) -> None:
        """Attribute every default-marked commit to *branch*."""
        for commit_id, note in self.backend.list_notes():
            if note == DELETED_COMMIT_NOTE:
                continue
            if note == DEFAULT_NOTE:
                self._replace_note(commit_id, branch)
                logger.debug("Attributed %s to %s", commit_id[:8], branch)

    def _replace_note(self, commit_id: str, text: str) -> None:
        self.backend.remove_note(commit_id)
        self.backend.set_note(commit_id, text)

    # ------------------------------------------------------------------
    # Stored commits
    # ------------------------------------------------------------------

    def _walk_history(self) -> Iterator[tuple[CommitInfo, str | None]]:
        head = self.get_undo_branch_ref()
        if head is None or self.history_size == 0:
            return
        for commit in islice(self.backend.walk_from(head), self.history_size):
            yield commit, self.backend.get_note(commit.hash)

    def get_stored_commits(self) -> list[CommitInfo]:
        """Return the live history commits, newest first."""
        return [
            commit
            for commit, note in self._walk_history()
            if note != DELETED_COMMIT_NOTE
        ]

    def get_stored_commits_with_notes(self) -> list[StoredCommit]:
        return [
            StoredCommit(**commit.model_dump(), note=note or "")
            for commit, note in self._walk_history()
            if note != DELETED_COMMIT_NOTE
        ]

    def _find_latest_commit_with_note(self, text: str) -> CommitInfo | None:
        for commit, note in self._walk_history():
            if note is None or note == DELETED_COMMIT_NOTE:
                continue
            if note == text:
                return commit
        return None

    # ------------------------------------------------------------------
    # Undo
    # ------------------------------------------------------------------

    def undo_last_change(self) -> UndoResult:
        """Undo the most recent attributable operation."""
        if self.history_size == 0:
            return UndoResult(
                status=UndoStatus.NOTHING_TO_UNDO,
                message="History branch is empty",
            )

        target = self._find_latest_commit_with_note(DEFAULT_NOTE)
        if target is None:
            target = self._find_latest_commit_with_note(self.backend.current_branch())
        if target is None:
            return UndoResult(
                status=UndoStatus.NOTHING_TO_UNDO,
                message="No operation left to undo on this branch",
            )

        result = self._undo_given_commit(target)
        if result.success:
            self._rebaseline_monitor()
        return result

    def _undo_given_commit(self, target: CommitInfo) -> UndoResult:
        """Revert *target* on the history branch and replay the inverse on the working branch.

        The working branch is checked out again on every exit path.  A merge
        commit cannot be reverted; that case is reported in the result and
        leaves the repository as it was.
        """
        backend = self.backend
        branch_name = self.get_undo_branch_name()

        prepared = backend.stage_all_and_commit(UNDO_PREPARE_COMMIT_MSG, allow_clean=True)

        try:
            with backend.on_branch(branch_name):
                reverted = backend.revert(target.hash)
        except MultipleParentsNotAllowedError:
            self._unwind_prepare_commit(prepared)
            logger.warning("Cannot undo merge commit %s", target.short_hash)
            return UndoResult(
                status=UndoStatus.MERGE_COMMIT,
                message=f"Cannot undo merge commit {target.short_hash}",
                commit=target.hash,
            )
        except UndoError:
            self._unwind_prepare_commit(prepared)
            raise

        if reverted is None:
            self._unwind_prepare_commit(prepared)
            return UndoResult(
                status=UndoStatus.NOTHING_TO_REVERT,
                message=f"Failed to revert {target.short_hash} on the history branch",
                commit=target.hash,
            )

        try:
            backend.cherry_pick(reverted.hash)
        except CherryPickError:
            with backend.on_branch(branch_name):
                backend.hard_reset(f"{reverted.hash}~1")
            self._unwind_prepare_commit(prepared)
            raise

        with backend.on_branch(branch_name):
            backend.hard_reset(f"{reverted.hash}~1")

        self._replace_note(target.hash, DELETED_COMMIT_NOTE)
        logger.info("Undid %s", target.short_hash)
        return UndoResult(
            status=UndoStatus.SUCCESS,
            message=f"Undid {target.short_hash}",
            commit=target.hash,
            revert_commit=reverted.hash,
        )

    def _unwind_prepare_commit(self, prepared: CommitInfo | None) -> None:
        if prepared is None:
            return
        self.backend.reset_keep_worktree(f"{prepared.hash}~1")

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------

    def reset(self) -> ResetResult:
        """Discard everything appended to the history branch since the last reset."""
        if self.history_size == 0:
            return ResetResult(success=False, message="Nothing has been recorded yet")
        if not self.backend.is_clean():
            return ResetResult(
                success=False,
                message="Working tree has uncommitted changes",
            )

        size = self.history_size
        with self.backend.on_branch(self.get_undo_branch_name()):
            start = self.backend.resolve(f"HEAD~{size}")
            self.backend.hard_reset(start)

        self.commits_monitor.reset()
        self.history_size = 0
        logger.info("History branch reset by %d commits", size)
        return ResetResult(
            success=True,
            message=f"Removed {size} commits from the history branch",
            commits_removed=size,
        )
