"""Commit drift detection on the working branch."""

from __future__ import annotations

import logging

from ..models.git import MonitorSnapshot, RepositoryCommitState
from .backend import GitBackend

logger = logging.getLogger(__name__)


class RepositoryCommitsMonitor:
    """Classifies what happened on the working branch since the last poll.

    The monitor only remembers the previous observation; the returned
    :class:`RepositoryCommitState` is computed fresh on every call.
    """

    def __init__(self, undo_branch_name: str | None = None) -> None:
        self.undo_branch_name = undo_branch_name
        self.branch_with_one_new_commit: str | None = None
        self._snapshot: MonitorSnapshot | None = None

    def set_undo_branch_name(self, name: str) -> None:
        self.undo_branch_name = name

    @property
    def snapshot(self) -> MonitorSnapshot | None:
        return self._snapshot

    def reset(self) -> None:
        """Forget the baseline; the next poll starts from scratch."""
        self._snapshot = None
        self.branch_with_one_new_commit = None

    def _observe(self, backend: GitBackend) -> MonitorSnapshot:
        branch = backend.current_branch()
        heads = backend.branch_heads()
        return MonitorSnapshot(branch=branch, head=heads.get(branch), heads=heads)

    def update_commit_counters(self, backend: GitBackend) -> RepositoryCommitState:
        """Poll *backend* and classify the change since the previous poll."""
        current = self._observe(backend)

        if self.undo_branch_name and current.branch == self.undo_branch_name:
            logger.debug("History branch is checked out; skipping poll")
            return RepositoryCommitState.NO_CHANGES

        previous = self._snapshot
        self._snapshot = current

        if previous is None:
            logger.debug("Commit monitor baseline recorded at %s", current.head)
            return RepositoryCommitState.NO_CHANGES

        if current.branch != previous.branch:
            return self._classify_branch_switch(backend, previous, current)

        if current.head == previous.head:
            return RepositoryCommitState.NO_CHANGES

        if (
            previous.head is not None
            and current.head is not None
            and backend.count_new_commits(previous.head, current.head) == 1
        ):
            self.branch_with_one_new_commit = current.branch
            return RepositoryCommitState.ONE_NEW_COMMIT

        logger.debug(
            "Multiple commits changed on %s: %s -> %s",
            current.branch,
            previous.head,
            current.head,
        )
        return RepositoryCommitState.MULTIPLE_CHANGED_COMMITS

    def _classify_branch_switch(
        self,
        backend: GitBackend,
        previous: MonitorSnapshot,
        current: MonitorSnapshot,
    ) -> RepositoryCommitState:
        """A checkout alone is not a change; the new branch must also have moved."""
        last_seen = previous.heads.get(current.branch)
        if last_seen is not None:
            moved = current.head != last_seen
        elif previous.head is None or current.head is None:
            moved = False
        else:
            # Unseen branch: it moved only if it grew past the old working head
            moved = bool(backend.count_new_commits(previous.head, current.head))

        if not moved:
            logger.debug("Switched from %s to %s", previous.branch, current.branch)
            return RepositoryCommitState.NO_CHANGES

        logger.debug(
            "Switched from %s to %s, which moved to %s",
            previous.branch,
            current.branch,
            current.head,
        )
        return RepositoryCommitState.MULTIPLE_CHANGED_COMMITS
