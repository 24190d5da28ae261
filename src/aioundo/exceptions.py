"""Exception hierarchy for aioundo."""


class UndoError(Exception):
    """Base exception for all aioundo errors."""


class ConfigError(UndoError):
    """The undo configuration could not be loaded."""


class GitError(UndoError):
    """Error during a git operation."""


class GitNotInitializedError(GitError):
    """The project directory is not a git repository."""


class NothingToCommitError(GitError):
    """A commit was requested but the working tree is clean."""


class RefAlreadyExistsError(GitError):
    """A branch with the requested name already exists."""


class RefNotFoundError(GitError):
    """A branch or ref expression could not be resolved."""


class CheckoutConflictError(GitError):
    """Checkout would overwrite local modifications."""


class MultipleParentsNotAllowedError(GitError):
    """Reverting a merge commit is not supported."""


class RevertConflictError(GitError):
    """Reverting a commit produced conflicts."""


class CherryPickError(GitError):
    """Cherry-picking a commit failed or conflicted."""


class InstallError(UndoError):
    """The history branch could not be installed."""


class HistoryNotInstalledError(UndoError):
    """An operation needs the history branch but ``install()`` was never run."""


class UnknownCommitStateError(UndoError):
    """The commit monitor returned a state the engine does not handle."""
