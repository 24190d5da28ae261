"""Tests for Pydantic models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from aioundo.models import (
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


class TestUndoConfig:
    def test_defaults(self) -> None:
        c = UndoConfig()
        assert c.history_branch_name == "forge-history"
        assert c.ignore_file == ".gitignore"

    def test_alias_and_field_name(self) -> None:
        assert UndoConfig.model_validate({"forge-undo-branch": "h"}).history_branch_name == "h"
        assert UndoConfig(history_branch_name="h2").history_branch_name == "h2"

    def test_blank_value_falls_back(self) -> None:
        assert UndoConfig(history_branch_name="   ").history_branch_name == "forge-history"

    def test_value_is_stripped(self) -> None:
        assert UndoConfig(history_branch_name=" hist ").history_branch_name == "hist"

    def test_from_mapping(self) -> None:
        assert UndoConfig.from_mapping(None) == UndoConfig()
        c = UndoConfig.from_mapping({"forge-undo-branch": None, "author_email": "a@b"})
        assert c.history_branch_name == "forge-history"
        assert c.author_email == "a@b"


class TestCommitInfo:
    def test_short_hash(self) -> None:
        c = CommitInfo(hash="0123456789abcdef", message="m", author="a", date="d")
        assert c.short_hash == "01234567"
        assert c.parents == []
        assert c.is_merge is False

    def test_merge(self) -> None:
        c = CommitInfo(hash="h", parents=["p1", "p2"], message="m", author="a", date="d")
        assert c.is_merge is True

    def test_missing_required(self) -> None:
        with pytest.raises(ValidationError):
            CommitInfo(hash="h")  # type: ignore[call-arg]

    def test_stored_commit_default_note(self) -> None:
        s = StoredCommit(hash="h", message="m", author="a", date="d")
        assert s.note == ""


class TestResults:
    def test_undo_result_success(self) -> None:
        assert UndoResult(status=UndoStatus.SUCCESS, message="ok").success is True
        for status in (
            UndoStatus.NOTHING_TO_UNDO,
            UndoStatus.NOTHING_TO_REVERT,
            UndoStatus.MERGE_COMMIT,
        ):
            assert UndoResult(status=status, message="no").success is False

    def test_status_values(self) -> None:
        assert UndoStatus("merge_commit") is UndoStatus.MERGE_COMMIT
        assert RepositoryCommitState("ONE_NEW_COMMIT") is RepositoryCommitState.ONE_NEW_COMMIT

    def test_install_result_defaults(self) -> None:
        r = InstallResult(success=True, history_branch="forge-history")
        assert r.head is None
        assert r.created_history_branch is False

    def test_reset_result_defaults(self) -> None:
        assert ResetResult(success=False, message="nothing").commits_removed == 0

    def test_monitor_snapshot(self) -> None:
        s = MonitorSnapshot(branch="master")
        assert s.head is None
        assert s.heads == {}
