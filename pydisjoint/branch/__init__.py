"""Branch names for issue groups.

Rules from git-check-ref-format: https://git-scm.com/docs/git-check-ref-format
"""

import logging
import re
from typing import List, Set

from ..errors import PlanError
from ..typing import BranchName, Commit, DisjointBranch, Issue, IssueGroup, IssueGroupMap
from ..util import unique_name

# Get module logger
logger = logging.getLogger(__name__)

CONTROL_CHARACTER_REGEX = re.compile(r'[\x00-\x1f\x7f]+')
WHITESPACE_REGEX = re.compile(r'\s+')
MULTIPLE_SLASHES_REGEX = re.compile(r'/{2,}')
MULTIPLE_DOTS_REGEX = re.compile(r'\.{2,}')
MULTIPLE_HYPHENS_REGEX = re.compile(r'-{2,}')

# Forbidden anywhere in a ref name
FORBIDDEN_SEQUENCES = ('~', '^', ':', '?', '*', '[', '@{', '@', '\\')

# Characters that interfere with terminal tab-completion
CHARACTERS_TO_REPLACE_WITH_HYPHEN = ('!', '`', '(', ')')
CHARACTERS_TO_REMOVE = ('\'', '"')


def sanitize_git_branch_name(text: str) -> str:
    """Replace everything git refuses in a ref name with hyphens."""
    result = text

    # No slash-separated component can begin with a dot or end with .lock
    if result.startswith("."):
        result = "-" + result[1:]
    result = result.replace("/.", "/-")
    result = result.replace(".lock", "-")

    # No ASCII control characters, no space anywhere
    result = CONTROL_CHARACTER_REGEX.sub("-", result)
    result = WHITESPACE_REGEX.sub("-", result)
    result = "".join(c for c in result if not c.isspace())

    for sequence in FORBIDDEN_SEQUENCES:
        result = result.replace(sequence, "-")

    # No consecutive slashes, no consecutive dots
    result = MULTIPLE_SLASHES_REGEX.sub("-", result)
    result = MULTIPLE_DOTS_REGEX.sub("-", result)

    # Cannot begin with a slash, cannot end with a slash or a dot
    while result.startswith("/"):
        result = "-" + result[1:]
    result = result.rstrip("/.")

    # Invalid characters became hyphens so the name does not shrink to nothing
    return MULTIPLE_HYPHENS_REGEX.sub("-", result)


def branch_name_from_text(text: str) -> str:
    """Turn free text into a tidy, valid branch name."""
    # Quotes go first so removing them cannot join "." and "." back together
    for c in CHARACTERS_TO_REMOVE:
        text = text.replace(c, "")
    result = sanitize_git_branch_name(text)
    for c in CHARACTERS_TO_REPLACE_WITH_HYPHEN:
        result = result.replace(c, "-")
    result = MULTIPLE_HYPHENS_REGEX.sub("-", result)
    return result.strip("-/.")


def branch_name_from_issue_group(issue_group: IssueGroup, commit: Commit) -> str:
    """Derive the branch name for a group from its first commit."""
    summary = commit.summary
    if summary is None:
        raise PlanError(f"commit summary contains invalid UTF-8: {commit.commit_hash}")

    if isinstance(issue_group, Issue):
        raw = f"{issue_group.identifier}-{summary}"
    else:
        raw = summary
    name = branch_name_from_text(raw.lower())
    if not name:
        # Nothing printable left, fall back to the commit itself
        name = commit.short_hash
    return name


def plan_branches(group_map: IssueGroupMap) -> List[DisjointBranch]:
    """Plan out branch names to avoid collisions.

    This does not take existing branches in the local or remote repository
    into account. It only makes sure one run never tries to create the same
    branch twice.

    Raises:
        PlanError: If a first commit's summary is not text, or no unique name
            can be found
    """
    seen_branch_names: Set[str] = set()
    branches: List[DisjointBranch] = []

    for issue_group, commits in group_map.items():
        # Every group has at least one commit, and the first is convenient
        name = branch_name_from_issue_group(issue_group, commits[0])
        try:
            name, _ = unique_name(name, seen_branch_names)
        except OverflowError as e:
            raise PlanError(f"unable to create unique branch name for {issue_group}") from e

        logger.debug(f"Planned branch {name} for {issue_group} ({len(commits)} commits)")
        branches.append(DisjointBranch(issue_group, BranchName(name), commits))

    return branches
