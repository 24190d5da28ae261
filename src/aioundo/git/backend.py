"""Commit-graph primitives on top of GitPython.

Every method maps one git porcelain command onto the exception hierarchy in
:mod:`aioundo.exceptions`.  The backend keeps no state besides the open
``git.Repo``; the currently checked-out branch is the repository's own.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import git
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from ..exceptions import (
    CheckoutConflictError,
    CherryPickError,
    GitError,
    GitNotInitializedError,
    MultipleParentsNotAllowedError,
    NothingToCommitError,
    RefAlreadyExistsError,
    RefNotFoundError,
    RevertConflictError,
)
from ..models.git import CommitInfo

logger = logging.getLogger(__name__)

NOTES_REF = "refs/notes/commits"
INITIAL_BRANCH = "master"


def _stderr(exc: GitCommandError) -> str:
    stderr = exc.stderr or ""
    if isinstance(stderr, bytes):
        stderr = stderr.decode("utf-8", errors="replace")
    return stderr.strip()


def commit_info(commit: git.Commit) -> CommitInfo:
    """Convert a GitPython commit into a :class:`CommitInfo`."""
    message = commit.message
    if isinstance(message, bytes):
        message = message.decode("utf-8", errors="replace")
    return CommitInfo(
        hash=commit.hexsha,
        parents=[parent.hexsha for parent in commit.parents],
        message=message.rstrip("\n"),
        author=f"{commit.author.name} <{commit.author.email}>",
        date=commit.committed_datetime.isoformat(),
    )


class GitBackend:
    """Thin wrapper around a git working tree rooted at *root*."""

    def __init__(
        self,
        root: Path,
        *,
        author_name: str = "aioundo",
        author_email: str = "aioundo@localhost",
    ) -> None:
        self.root = root.resolve()
        self.author_name = author_name
        self.author_email = author_email
        self._repo: git.Repo | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def exists(self) -> bool:
        """Return ``True`` if *root* holds a git repository."""
        return (self.root / ".git").exists()

    def init(self) -> None:
        """Create a new repository in *root*."""
        self.root.mkdir(parents=True, exist_ok=True)
        try:
            self._repo = git.Repo.init(str(self.root), initial_branch=INITIAL_BRANCH)
        except GitCommandError as exc:
            raise GitError(f"git init failed: {_stderr(exc)}") from exc
        self.ensure_identity()
        logger.info("Git repository initialised in %s", self.root)

    def ensure_identity(self) -> None:
        """Write a repository-local committer identity if none is configured."""
        reader = self.repo.config_reader()
        name = reader.get_value("user", "name", default="")
        email = reader.get_value("user", "email", default="")
        if name and email:
            return
        with self.repo.config_writer() as writer:
            if not name:
                writer.set_value("user", "name", self.author_name)
            if not email:
                writer.set_value("user", "email", self.author_email)

    @property
    def repo(self) -> git.Repo:
        if self._repo is None:
            try:
                self._repo = git.Repo(str(self.root))
            except (InvalidGitRepositoryError, NoSuchPathError) as exc:
                raise GitNotInitializedError(
                    f"No git repository at {self.root}"
                ) from exc
        return self._repo

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def current_branch(self) -> str:
        try:
            return self.repo.active_branch.name
        except TypeError as exc:
            raise GitError("HEAD is detached; no branch is checked out") from exc

    def list_branches(self) -> list[str]:
        return [head.name for head in self.repo.heads]

    def branch_exists(self, name: str) -> bool:
        return name in self.list_branches()

    def create_branch(self, name: str) -> str:
        """Create *name* at the current HEAD and return the commit it points at."""
        if self.branch_exists(name):
            raise RefAlreadyExistsError(f"Branch already exists: {name}")
        try:
            head = self.repo.create_head(name)
        except (GitCommandError, ValueError) as exc:
            raise GitError(f"Failed to create branch {name}: {exc}") from exc
        return head.commit.hexsha

    def checkout(self, name: str) -> str:
        """Check out branch *name* and return its head commit id."""
        if not self.branch_exists(name):
            raise RefNotFoundError(f"Branch not found: {name}")
        try:
            self.repo.git.checkout(name)
        except GitCommandError as exc:
            stderr = _stderr(exc)
            if "would be overwritten" in stderr:
                raise CheckoutConflictError(
                    f"Checkout of {name} would overwrite local changes: {stderr}"
                ) from exc
            raise GitError(f"git checkout {name} failed: {stderr}") from exc
        return self.repo.head.commit.hexsha

    def head_of(self, branch: str) -> str | None:
        if not self.branch_exists(branch):
            return None
        return self.repo.heads[branch].commit.hexsha

    def branch_heads(self) -> dict[str, str]:
        """Return the commit id every local branch points at."""
        return {head.name: head.commit.hexsha for head in self.repo.heads}

    @contextmanager
    def on_branch(self, name: str) -> Iterator[str]:
        """Check out *name* for the duration of the block.

        Yields the branch that was checked out before.  That branch is checked
        out again on every exit path; if restoring it fails while another
        error is propagating, the restore failure is raised from it.
        """
        previous = self.current_branch()
        if previous != name:
            self.checkout(name)
        try:
            yield previous
        except Exception as exc:
            try:
                self._return_to(previous)
            except GitError as restore_exc:
                raise GitError(
                    f"Failed to return to branch {previous} after error: {exc}"
                ) from restore_exc
            raise
        self._return_to(previous)

    def _return_to(self, branch: str) -> None:
        if self.current_branch() != branch:
            self.checkout(branch)

    # ------------------------------------------------------------------
    # Working tree
    # ------------------------------------------------------------------

    def is_clean(self) -> bool:
        """Return ``True`` if there are no staged, unstaged or untracked changes."""
        return not self.repo.git.status("--porcelain")

    def stage_all(self) -> None:
        try:
            self.repo.git.add(A=True)
        except GitCommandError as exc:
            raise GitError(f"git add failed: {_stderr(exc)}") from exc

    def stage_all_and_commit(
        self,
        message: str,
        *,
        allow_clean: bool = False,
    ) -> CommitInfo | None:
        """Stage every change in the working tree and commit it.

        Raises :class:`NothingToCommitError` on a clean tree unless
        *allow_clean*, in which case ``None`` is returned.
        """
        if self.is_clean():
            if allow_clean:
                logger.debug("Nothing to commit for %r", message)
                return None
            raise NothingToCommitError(f"Nothing to commit for {message!r}")

        try:
            self.repo.git.add(A=True)
            self.repo.git.commit("-m", message)
        except GitCommandError as exc:
            raise GitError(f"git commit failed: {_stderr(exc)}") from exc
        return commit_info(self.repo.head.commit)

    def commit_paths(self, paths: list[str], message: str) -> CommitInfo:
        """Stage only *paths* and commit them."""
        try:
            self.repo.git.add("--", *paths)
            self.repo.git.commit("-m", message)
        except GitCommandError as exc:
            raise GitError(f"git commit failed: {_stderr(exc)}") from exc
        return commit_info(self.repo.head.commit)

    def hard_reset(self, ref: str) -> None:
        """Move the current branch to *ref*, discarding index and worktree changes."""
        try:
            self.repo.git.reset("--hard", ref)
        except GitCommandError as exc:
            raise GitError(f"git reset --hard {ref} failed: {_stderr(exc)}") from exc

    def reset_keep_worktree(self, ref: str) -> None:
        """Move the current branch to *ref*, leaving its changes in the working tree."""
        try:
            self.repo.git.reset("--mixed", ref)
        except GitCommandError as exc:
            raise GitError(f"git reset --mixed {ref} failed: {_stderr(exc)}") from exc

    def discard_changes(self) -> None:
        """Drop every uncommitted change, including untracked files."""
        try:
            self.repo.git.reset("--hard", "HEAD")
            self.repo.git.clean("-fd")
        except GitCommandError as exc:
            raise GitError(f"Discarding changes failed: {_stderr(exc)}") from exc

    # ------------------------------------------------------------------
    # Revert / cherry-pick
    # ------------------------------------------------------------------

    def revert(self, commit_id: str) -> CommitInfo | None:
        """Commit the inverse of *commit_id* onto the current branch.

        Returns ``None`` when the inverse diff is empty, i.e. the change has
        already been undone.  Merge commits are refused before the tree is
        touched.
        """
        target = self._get_commit(commit_id)
        if len(target.parents) > 1:
            raise MultipleParentsNotAllowedError(
                f"Cannot revert merge commit {target.hexsha[:8]}"
            )

        try:
            self.repo.git.revert("--no-commit", target.hexsha)
        except GitCommandError as exc:
            self.discard_changes()
            raise RevertConflictError(
                f"Reverting {target.hexsha[:8]} failed: {_stderr(exc)}"
            ) from exc

        if not self.repo.git.diff("--cached", "--name-only"):
            self.discard_changes()
            logger.debug("Revert of %s produced no changes", target.hexsha[:8])
            return None

        message = f'Revert "{target.summary}"\n\nThis reverts commit {target.hexsha}.'
        try:
            self.repo.git.commit("-m", message)
        except GitCommandError as exc:
            self.discard_changes()
            raise GitError(f"Committing revert failed: {_stderr(exc)}") from exc
        return commit_info(self.repo.head.commit)

    def cherry_pick(self, commit_id: str) -> CommitInfo:
        """Replay *commit_id* onto the current branch."""
        try:
            self.repo.git.cherry_pick(commit_id)
        except GitCommandError as exc:
            self._abort_cherry_pick()
            raise CherryPickError(
                f"Cherry-pick of {commit_id[:8]} failed: {_stderr(exc)}"
            ) from exc
        return commit_info(self.repo.head.commit)

    def _abort_cherry_pick(self) -> None:
        try:
            self.repo.git.cherry_pick("--abort")
        except GitCommandError as exc:
            logger.warning("cherry-pick --abort failed, resetting: %s", _stderr(exc))
            self.repo.git.reset("--merge")

    # ------------------------------------------------------------------
    # Refs and walking
    # ------------------------------------------------------------------

    def resolve(self, expression: str) -> str:
        """Resolve a ref expression such as ``HEAD~3`` to a full commit id."""
        try:
            return self.repo.git.rev_parse("--verify", f"{expression}^{{commit}}")
        except GitCommandError as exc:
            raise RefNotFoundError(f"Cannot resolve {expression!r}") from exc

    def _get_commit(self, commit_id: str) -> git.Commit:
        return self.repo.commit(self.resolve(commit_id))

    def count_commits(self, ref: str) -> int:
        """Count first-parent commits reachable from *ref*."""
        try:
            return int(self.repo.git.rev_list("--count", "--first-parent", ref))
        except GitCommandError as exc:
            raise RefNotFoundError(f"Cannot count commits on {ref!r}") from exc

    def count_new_commits(self, old: str, new: str) -> int | None:
        """Count commits reachable from *new* but not *old*.

        Returns ``None`` when *old* is not an ancestor of *new*.
        """
        try:
            self.repo.git.merge_base("--is-ancestor", old, new)
        except GitCommandError:
            return None
        return int(self.repo.git.rev_list("--count", f"{old}..{new}"))

    def walk_from(self, ref: str) -> Iterator[CommitInfo]:
        """Yield commits reachable from *ref*, newest first.

        Each call starts a new walk; the generator cannot be rewound.
        """
        for commit in self.repo.iter_commits(ref):
            yield commit_info(commit)

    # ------------------------------------------------------------------
    # Notes
    # ------------------------------------------------------------------

    def get_note(self, commit_id: str) -> str | None:
        """Return the first line of the note on *commit_id*, or ``None``."""
        try:
            text = self.repo.git.notes("show", commit_id)
        except GitCommandError as exc:
            if "no note found" in _stderr(exc).lower():
                return None
            raise GitError(f"Failed to read note on {commit_id[:8]}: {_stderr(exc)}") from exc
        lines = text.splitlines()
        return lines[0] if lines else ""

    def set_note(self, commit_id: str, text: str) -> None:
        """Attach *text* to *commit_id*; the commit must not already have a note."""
        try:
            self.repo.git.notes("add", "-m", text, commit_id)
        except GitCommandError as exc:
            raise GitError(f"Failed to add note on {commit_id[:8]}: {_stderr(exc)}") from exc

    def remove_note(self, commit_id: str) -> None:
        try:
            self.repo.git.notes("remove", "--ignore-missing", commit_id)
        except GitCommandError as exc:
            raise GitError(
                f"Failed to remove note on {commit_id[:8]}: {_stderr(exc)}"
            ) from exc

    def list_notes(self) -> list[tuple[str, str]]:
        """Return ``(commit_id, first_line)`` for every annotated commit."""
        if not self._has_notes():
            return []
        notes: list[tuple[str, str]] = []
        for line in self.repo.git.notes("list").splitlines():
            blob_id, commit_id = line.split()
            lines = self.repo.git.cat_file("-p", blob_id).splitlines()
            notes.append((commit_id, lines[0] if lines else ""))
        return notes

    def _has_notes(self) -> bool:
        try:
            self.repo.git.rev_parse("--verify", "--quiet", NOTES_REF)
        except GitCommandError:
            return False
        return True

    # ------------------------------------------------------------------
    # Stash
    # ------------------------------------------------------------------

    def stash_push(self, message: str) -> None:
        try:
            self.repo.git.stash("push", "--include-untracked", "-m", message)
        except GitCommandError as exc:
            raise GitError(f"git stash push failed: {_stderr(exc)}") from exc

    def stash_apply(self, *, index: bool = False) -> None:
        """Apply the newest stash; *index* also restores what was staged."""
        args = ["apply", "--index"] if index else ["apply"]
        try:
            self.repo.git.stash(*args)
        except GitCommandError as exc:
            raise GitError(f"git stash apply failed: {_stderr(exc)}") from exc

    def stash_drop(self) -> None:
        try:
            self.repo.git.stash("drop")
        except GitCommandError as exc:
            raise GitError(f"git stash drop failed: {_stderr(exc)}") from exc
