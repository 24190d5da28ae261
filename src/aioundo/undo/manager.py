"""Async entry points for the undo engine.

All public async methods delegate to :class:`UndoEngine` via
``asyncio.to_thread`` so that git I/O never blocks the event loop.  Each call
runs one complete synchronous sequence; callers must not start a second call
while one is still in flight.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from ..exceptions import HistoryNotInstalledError, InstallError, UndoError
from ..models.config import UndoConfig
from ..models.git import (
    CommitInfo,
    InstallResult,
    RepositoryCommitState,
    ResetResult,
    StoredCommit,
    UndoResult,
)
from .engine import UndoEngine

logger = logging.getLogger(__name__)

T = TypeVar("T")


class UndoManager:
    """Per-operation undo for the git repository at *project_path*.

    The constructor accepts plain values; configuration files are read by
    :func:`aioundo.settings.load_undo_config` and passed in as *config*.
    """

    def __init__(
        self,
        project_path: Path,
        *,
        config: UndoConfig | None = None,
        history_branch_name: str | None = None,
    ) -> None:
        config = config or UndoConfig()
        if history_branch_name:
            config = UndoConfig.model_validate(
                {**config.model_dump(), "history_branch_name": history_branch_name}
            )
        self.project_path = project_path.resolve()
        self.engine = UndoEngine(self.project_path, config)
        self.install_result: InstallResult | None = None

    @property
    def is_ready(self) -> bool:
        return self.install_result is not None and self.install_result.success

    @property
    def history_size(self) -> int:
        return self.engine.history_size

    def get_undo_branch_name(self) -> str:
        return self.engine.get_undo_branch_name()

    def _require_ready(self) -> None:
        if not self.is_ready:
            raise HistoryNotInstalledError(
                "History branch not installed, call install() first"
            )

    async def _run(self, action: str, func: Callable[..., T], *args: Any) -> T:
        try:
            return await asyncio.to_thread(func, *args)
        except UndoError as exc:
            logger.error("Failed to %s: %s", action, exc)
            raise
        except Exception as exc:
            logger.error("Failed to %s: %s", action, exc)
            raise UndoError(f"Failed to {action}: {exc}") from exc

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def install(self) -> InstallResult:
        """Bootstrap the repository and history branch; idempotent."""
        try:
            result = await self._run("install the history branch", self.engine.install)
        except InstallError:
            raise
        except UndoError as exc:
            raise InstallError(str(exc)) from exc
        self.install_result = result
        return result

    async def is_installed(self) -> bool:
        return await self._run("check installation", self.engine.is_installed)

    # ------------------------------------------------------------------
    # Tracking
    # ------------------------------------------------------------------

    async def record_operation(self, operation_name: str) -> CommitInfo | None:
        """Mirror the current uncommitted changes as one history commit."""
        self._require_ready()
        return await self._run(
            f"record {operation_name}", self.engine.record_operation, operation_name
        )

    async def check_and_update_repository_for_new_commits(self) -> RepositoryCommitState:
        self._require_ready()
        return await self._run(
            "poll for new commits",
            self.engine.check_and_update_repository_for_new_commits,
        )

    # ------------------------------------------------------------------
    # Undo / reset
    # ------------------------------------------------------------------

    async def undo_last_change(self) -> UndoResult:
        self._require_ready()
        return await self._run("undo last change", self.engine.undo_last_change)

    async def reset(self) -> ResetResult:
        self._require_ready()
        return await self._run("reset history branch", self.engine.reset)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    async def get_stored_commits(self) -> list[CommitInfo]:
        if not self.is_ready:
            return []
        return await self._run("list stored commits", self.engine.get_stored_commits)

    async def get_stored_commits_with_notes(self) -> list[StoredCommit]:
        if not self.is_ready:
            return []
        return await self._run(
            "list stored commits", self.engine.get_stored_commits_with_notes
        )
