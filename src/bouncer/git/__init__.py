"""Git probes for the pending commit."""

from bouncer.git.exec import ExecError, ExecResult, run_git
from bouncer.git.snapshot import (
    NEW_REPOSITORY_REVISION,
    GitErrorType,
    RepositorySnapshot,
    classify_git_error,
    take_snapshot,
)

__all__ = [
    "NEW_REPOSITORY_REVISION",
    "ExecError",
    "ExecResult",
    "GitErrorType",
    "RepositorySnapshot",
    "classify_git_error",
    "run_git",
    "take_snapshot",
]
