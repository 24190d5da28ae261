"""Tests for the commit state monitor."""

from __future__ import annotations

from aioundo.git.backend import GitBackend
from aioundo.git.monitor import RepositoryCommitsMonitor
from aioundo.models.git import RepositoryCommitState


def _commit(backend: GitBackend, name: str) -> None:
    (backend.root / name).write_text(f"{name}\n")
    backend.stage_all_and_commit(f"add {name}")


class TestBootstrap:
    def test_first_poll_records_baseline(self, backend: GitBackend) -> None:
        monitor = RepositoryCommitsMonitor()
        assert monitor.snapshot is None
        state = monitor.update_commit_counters(backend)
        assert state is RepositoryCommitState.NO_CHANGES
        assert monitor.snapshot is not None
        assert monitor.snapshot.branch == "master"
        assert monitor.snapshot.head == backend.resolve("HEAD")

    def test_first_poll_ignores_existing_commits(self, backend: GitBackend) -> None:
        _commit(backend, "a.txt")
        _commit(backend, "b.txt")
        monitor = RepositoryCommitsMonitor()
        assert monitor.update_commit_counters(backend) is RepositoryCommitState.NO_CHANGES

    def test_reset_returns_to_bootstrap(self, backend: GitBackend) -> None:
        monitor = RepositoryCommitsMonitor()
        monitor.update_commit_counters(backend)
        monitor.reset()
        assert monitor.snapshot is None
        _commit(backend, "a.txt")
        _commit(backend, "b.txt")
        assert monitor.update_commit_counters(backend) is RepositoryCommitState.NO_CHANGES


class TestClassification:
    def test_no_changes(self, backend: GitBackend) -> None:
        monitor = RepositoryCommitsMonitor()
        monitor.update_commit_counters(backend)
        assert monitor.update_commit_counters(backend) is RepositoryCommitState.NO_CHANGES

    def test_dirty_tree_is_not_a_change(self, backend: GitBackend) -> None:
        monitor = RepositoryCommitsMonitor()
        monitor.update_commit_counters(backend)
        (backend.root / "base.txt").write_text("edited\n")
        assert monitor.update_commit_counters(backend) is RepositoryCommitState.NO_CHANGES

    def test_one_new_commit(self, backend: GitBackend) -> None:
        monitor = RepositoryCommitsMonitor()
        monitor.update_commit_counters(backend)
        _commit(backend, "a.txt")

        assert monitor.update_commit_counters(backend) is RepositoryCommitState.ONE_NEW_COMMIT
        assert monitor.branch_with_one_new_commit == "master"
        # The baseline moved, so polling again sees nothing new
        assert monitor.update_commit_counters(backend) is RepositoryCommitState.NO_CHANGES

    def test_multiple_new_commits(self, backend: GitBackend) -> None:
        monitor = RepositoryCommitsMonitor()
        monitor.update_commit_counters(backend)
        _commit(backend, "a.txt")
        _commit(backend, "b.txt")
        assert (
            monitor.update_commit_counters(backend)
            is RepositoryCommitState.MULTIPLE_CHANGED_COMMITS
        )

    def test_rewound_head(self, backend: GitBackend) -> None:
        _commit(backend, "a.txt")
        monitor = RepositoryCommitsMonitor()
        monitor.update_commit_counters(backend)
        backend.hard_reset("HEAD~1")
        assert (
            monitor.update_commit_counters(backend)
            is RepositoryCommitState.MULTIPLE_CHANGED_COMMITS
        )

    def test_branch_switch_without_commits(self, backend: GitBackend) -> None:
        monitor = RepositoryCommitsMonitor()
        monitor.update_commit_counters(backend)
        backend.create_branch("feature")
        backend.checkout("feature")

        assert monitor.update_commit_counters(backend) is RepositoryCommitState.NO_CHANGES
        assert monitor.snapshot is not None
        assert monitor.snapshot.branch == "feature"

    def test_commit_on_other_branch(self, backend: GitBackend) -> None:
        monitor = RepositoryCommitsMonitor()
        monitor.update_commit_counters(backend)
        backend.create_branch("feature")
        backend.checkout("feature")
        _commit(backend, "a.txt")

        assert (
            monitor.update_commit_counters(backend)
            is RepositoryCommitState.MULTIPLE_CHANGED_COMMITS
        )


class TestBranchSwitch:
    def test_switch_to_older_branch(self, backend: GitBackend) -> None:
        backend.create_branch("older")
        monitor = RepositoryCommitsMonitor()
        monitor.update_commit_counters(backend)
        _commit(backend, "a.txt")
        assert monitor.update_commit_counters(backend) is RepositoryCommitState.ONE_NEW_COMMIT

        backend.checkout("older")
        assert monitor.update_commit_counters(backend) is RepositoryCommitState.NO_CHANGES
        assert monitor.snapshot is not None
        assert monitor.snapshot.branch == "older"

        backend.checkout("master")
        assert monitor.update_commit_counters(backend) is RepositoryCommitState.NO_CHANGES

    def test_switch_to_unseen_older_branch(self, backend: GitBackend) -> None:
        _commit(backend, "a.txt")
        monitor = RepositoryCommitsMonitor()
        monitor.update_commit_counters(backend)
        backend.repo.create_head("older", "HEAD~1")
        backend.checkout("older")

        assert monitor.update_commit_counters(backend) is RepositoryCommitState.NO_CHANGES

    def test_switch_to_branch_that_moved(self, backend: GitBackend) -> None:
        backend.create_branch("other")
        monitor = RepositoryCommitsMonitor()
        monitor.update_commit_counters(backend)
        backend.checkout("other")
        _commit(backend, "a.txt")

        assert (
            monitor.update_commit_counters(backend)
            is RepositoryCommitState.MULTIPLE_CHANGED_COMMITS
        )


class TestHistoryBranch:
    def test_snapshot_records_every_branch_head(self, backend: GitBackend) -> None:
        backend.create_branch("forge-history")
        monitor = RepositoryCommitsMonitor("forge-history")
        monitor.update_commit_counters(backend)
        assert monitor.snapshot is not None
        assert monitor.snapshot.heads == {
            "master": backend.head_of("master"),
            "forge-history": backend.head_of("forge-history"),
        }

    def test_poll_on_history_branch_is_skipped(self, backend: GitBackend) -> None:
        backend.create_branch("forge-history")
        monitor = RepositoryCommitsMonitor()
        monitor.set_undo_branch_name("forge-history")
        monitor.update_commit_counters(backend)
        baseline = monitor.snapshot

        backend.checkout("forge-history")
        _commit(backend, "a.txt")
        _commit(backend, "b.txt")
        assert monitor.update_commit_counters(backend) is RepositoryCommitState.NO_CHANGES
        assert monitor.snapshot == baseline
