"""Staged diff and commit identity for the gate.

Three probes run in order: work tree check, staged diff, current revision.
The first two are fatal on failure; a missing HEAD only means the
repository has no commits yet.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from bouncer import ui
from bouncer.audit import GIT_COMMAND_ERROR_COMMIT, build_record, error_payload
from bouncer.git.exec import ExecError, run_git
from bouncer.outcome import Fatal

logger = logging.getLogger(__name__)

NEW_REPOSITORY_REVISION = "<new>"

_REPOSITORY_HINTS = ("not a git repository", "not a work tree", "outside repository")
_NO_COMMITS_HINTS = (
    "needed a single revision",
    "unknown revision",
    "ambiguous argument 'head'",
    "bad revision",
    "does not have any commits",
)


class GitErrorType(str, Enum):
    """Categories of git probe failures."""

    NOT_FOUND = "Not Found"
    REPOSITORY = "Repository"
    NO_CHANGES = "No Changes"
    NO_COMMITS = "No Commits"
    COMMAND = "Command"


_GIT_MESSAGES: dict[GitErrorType, tuple[str, str]] = {
    GitErrorType.NOT_FOUND: (
        "Git executable not found.",
        "Install git and make sure it is on your PATH.",
    ),
    GitErrorType.REPOSITORY: (
        "Not inside a git work tree.",
        "Run bouncer from within a git repository (normally as a pre-commit hook).",
    ),
    GitErrorType.NO_CHANGES: (
        "No staged changes found.",
        "Stage your changes with 'git add' before committing.",
    ),
    GitErrorType.NO_COMMITS: (
        "Repository has no commits yet.",
        "Nothing to do; the first commit is reviewed as <new>.",
    ),
    GitErrorType.COMMAND: (
        "Git command failed.",
        "Run the git command shown above manually to see what went wrong.",
    ),
}


@dataclass(frozen=True)
class GitErrorKind:
    type: GitErrorType
    message: str
    action: str
    detail: str
    returncode: int | None = None


@dataclass(frozen=True)
class RepositorySnapshot:
    """What the gate needs to know about the pending commit."""

    diff: str
    revision_id: str


def _kind(error_type: GitErrorType, detail: str, returncode: int | None = None) -> GitErrorKind:
    message, action = _GIT_MESSAGES[error_type]
    return GitErrorKind(type=error_type, message=message, action=action, detail=detail, returncode=returncode)


def classify_git_error(exc: BaseException) -> GitErrorKind:
    """Map a raised git failure to its category."""
    if isinstance(exc, FileNotFoundError):
        return _kind(GitErrorType.NOT_FOUND, str(exc))

    if isinstance(exc, ExecError):
        stderr = (exc.result.stderr or exc.result.stdout).strip()
        lowered = stderr.lower()
        returncode = exc.result.returncode
        if any(hint in lowered for hint in _REPOSITORY_HINTS):
            return _kind(GitErrorType.REPOSITORY, stderr, returncode)
        if any(hint in lowered for hint in _NO_COMMITS_HINTS):
            return _kind(GitErrorType.NO_COMMITS, stderr, returncode)
        return _kind(GitErrorType.COMMAND, stderr or str(exc), returncode)

    return _kind(GitErrorType.COMMAND, str(exc))


def git_fatal(kind: GitErrorKind, command: str) -> Fatal:
    reason = f"Git Command Error: {kind.type.value}: {kind.message}"
    if kind.detail:
        reason = f"{reason} {kind.detail}"
    record = build_record(
        commit=GIT_COMMAND_ERROR_COMMIT,
        verdict="ERROR",
        reason=reason,
        error=error_payload(kind.type.value, kind.detail or kind.message, code=kind.returncode),
        operation=command,
    )
    details = [f"Command: {command}"]
    if kind.detail:
        details.append(kind.detail)
    return Fatal(
        kind="Git Command Error",
        category=kind.type.value,
        message=kind.message,
        action=kind.action,
        record=record,
        details=tuple(details),
    )


def _probe(args: list[str], cwd: Path) -> str | GitErrorKind:
    try:
        return run_git(args, cwd=cwd).stdout
    except (ExecError, OSError) as exc:
        return classify_git_error(exc)


def take_snapshot(cwd: Path) -> RepositorySnapshot | Fatal:
    """Run the work tree, staged diff and revision probes in order."""
    work_tree_args = ["rev-parse", "--is-inside-work-tree"]
    inside = _probe(work_tree_args, cwd)
    if isinstance(inside, GitErrorKind):
        if inside.type is GitErrorType.COMMAND:
            inside = _kind(GitErrorType.REPOSITORY, inside.detail, inside.returncode)
        return git_fatal(inside, "git " + " ".join(work_tree_args))
    if inside.strip() != "true":
        return git_fatal(
            _kind(GitErrorType.REPOSITORY, "git rev-parse reported a location outside the work tree"),
            "git " + " ".join(work_tree_args),
        )

    diff_args = ["diff", "--cached", "--unified=0"]
    diff = _probe(diff_args, cwd)
    if isinstance(diff, GitErrorKind):
        return git_fatal(diff, "git " + " ".join(diff_args))
    if not diff.strip():
        return git_fatal(_kind(GitErrorType.NO_CHANGES, ""), "git " + " ".join(diff_args))

    revision = _probe(["rev-parse", "--verify", "HEAD"], cwd)
    if isinstance(revision, GitErrorKind):
        logger.debug("HEAD lookup failed (%s): %s", revision.type.value, revision.detail)
        ui.warn(
            "No commit history found",
            f"Reviewing this change as {NEW_REPOSITORY_REVISION}.",
        )
        revision_id = NEW_REPOSITORY_REVISION
    else:
        revision_id = revision.strip() or NEW_REPOSITORY_REVISION

    logger.debug("staged diff: %d chars at revision %s", len(diff), revision_id)
    return RepositorySnapshot(diff=diff, revision_id=revision_id)
