"""Errors raised by git-disjoint.

Every error carries the context that triggered it (commit id, branch name,
command line or URL) in its message; the underlying cause is chained with
``raise ... from err`` and rendered by :func:`render_error`.
"""

from typing import List, Optional


class DisjointError(Exception):
    """Base class for all git-disjoint errors."""


class ClassifyError(DisjointError):
    """A commit could not be assigned to an issue group."""


class SelectError(DisjointError):
    """The user did not complete the issue-group selection."""


class PlanError(DisjointError):
    """A branch name could not be planned for an issue group."""


class RepositoryStateError(DisjointError):
    """The repository is not in a state git-disjoint can operate on."""


class ExecuteError(DisjointError):
    """An external command failed to launch or exited non-zero."""

    def __init__(self, message: str, command: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.command = command or []


class PullRequestError(DisjointError):
    """Creating or opening a pull request failed."""

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class EditorError(DisjointError):
    """The pull-request editor round-trip failed."""


def render_error(err: BaseException) -> str:
    """Render an error and its chain of causes.

    Output looks like::

        Error: unable to cherry-pick 1a2b3c4 onto ab-1-fix-login

        Caused by:
            0: child process exited with non-zero code: git cherry-pick ...
            1: Cmd('git') failed due to: exit code(1)
    """
    lines = [f"Error: {err}"]
    causes: List[BaseException] = []
    cause = err.__cause__
    while cause is not None:
        causes.append(cause)
        cause = cause.__cause__
    if causes:
        lines.append("")
        lines.append("Caused by:")
        for n, cause in enumerate(causes):
            lines.append(f"    {n}: {cause}")
    return "\n".join(lines)
