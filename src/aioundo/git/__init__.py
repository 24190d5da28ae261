"""Git commit-graph access with GitPython."""

from .backend import GitBackend, commit_info
from .monitor import RepositoryCommitsMonitor

__all__ = [
    "GitBackend",
    "RepositoryCommitsMonitor",
    "commit_info",
]
