"""Common types used across the codebase."""

import enum
from dataclasses import dataclass
from typing import Dict, List, NewType, Optional, Protocol, Union

# Create NewTypes for commit identifiers and planned refs
CommitHash = NewType('CommitHash', str)
BranchName = NewType('BranchName', str)


class GitInterface(Protocol):
    """Protocol for running git commands."""
    def run_cmd(self, command: str) -> str:
        ...

    def must_git(self, command: str) -> str:
        ...


@dataclass(frozen=True)
class Commit:
    """Read-only view of a commit borrowed from the repository for one run."""
    commit_hash: CommitHash
    message: Optional[str]  # None when the raw message is not valid text
    author_name: str = ""
    author_email: str = ""

    @classmethod
    def from_strings(cls, commit_hash: str, message: Optional[str],
                     author_name: str = "", author_email: str = "") -> 'Commit':
        """Create a Commit from plain strings."""
        return cls(CommitHash(commit_hash), message, author_name, author_email)

    @property
    def summary(self) -> Optional[str]:
        """First line of the message, or None if the message is not text."""
        if self.message is None:
            return None
        return self.message.strip().split("\n", 1)[0].strip()

    @property
    def short_hash(self) -> str:
        return self.commit_hash[:7]

    def __str__(self) -> str:
        return f"{self.short_hash} {self.summary if self.summary is not None else '<invalid utf-8>'}"


class IssueKind(enum.Enum):
    """Where an issue reference came from."""
    TICKET = "ticket"
    GITHUB = "github"

    def __lt__(self, other: 'IssueKind') -> bool:
        return self.value < other.value


@dataclass(frozen=True, order=True)
class Issue:
    """Issue reference parsed from a commit trailer."""
    kind: IssueKind
    identifier: str

    def __str__(self) -> str:
        if self.kind is IssueKind.GITHUB:
            return f"#{self.identifier}"
        return self.identifier


@dataclass(frozen=True, order=True)
class CommitSummary:
    """One line of commit text used as a grouping key."""
    text: str

    def __str__(self) -> str:
        return self.text


# An issue group is keyed either by an issue or by a single commit's summary.
IssueGroup = Union[Issue, CommitSummary]

# Insertion-ordered: keys appear in the order they were first encountered.
IssueGroupMap = Dict[IssueGroup, List[Commit]]


@dataclass
class DisjointBranch:
    """A planned branch: its group, its name and the commits it will carry."""
    issue_group: IssueGroup
    branch_name: BranchName
    commits: List[Commit]
