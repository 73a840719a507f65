"""Group commits by the issue they belong to."""

import logging
from typing import Callable, Iterable, List, Optional, Sequence, Set

from ..errors import ClassifyError
from ..issue import parse_issue
from ..typing import Commit, CommitSummary, IssueGroup, IssueGroupMap
from ..util import unique_name

# Get module logger
logger = logging.getLogger(__name__)

# Chooses a subset of the offered issue groups.
Chooser = Callable[[Sequence[IssueGroup]], Set[IssueGroup]]


def classify_commits(commits: Iterable[Commit], consider_all: bool = False,
                     group_individually: bool = False) -> IssueGroupMap:
    """Bucket commits into issue groups.

    Args:
        commits: Commits ordered parent-first
        consider_all: Give commits without an issue trailer their own group
            instead of ignoring them
        group_individually: Put every commit in its own group, regardless of
            issue trailer

    Returns:
        Issue groups in the order they were first seen, each with its commits
        in their original order.

    Raises:
        ClassifyError: If a commit needs its own group but its summary is not
            valid text
    """
    group_map: IssueGroupMap = {}
    seen_summaries: Set[str] = set()
    suffix = 0

    for commit in commits:
        issue_group: Optional[IssueGroup] = None

        if not group_individually and commit.message is not None:
            issue_group = parse_issue(commit.message)

        if issue_group is None and (group_individually or consider_all):
            summary = commit.summary
            if summary is None:
                raise ClassifyError(
                    f"summary for commit {commit.commit_hash} is not a valid UTF-8 string")
            # Repeated summaries get a run-wide numeric suffix
            try:
                name, suffix = unique_name(summary, seen_summaries, suffix)
            except OverflowError as e:
                raise ClassifyError(
                    f"unable to create unique issue group for commit {commit.commit_hash}") from e
            issue_group = CommitSummary(name)

        if issue_group is None:
            logger.warning(f"Ignoring commit without issue trailer: {commit.commit_hash}")
            continue

        group_map.setdefault(issue_group, []).append(commit)

    logger.debug(f"Classified commits into {len(group_map)} issue groups")
    return group_map


def select_issue_groups(group_map: IssueGroupMap, choose: bool, overlay: bool,
                        chooser: Optional[Chooser] = None) -> IssueGroupMap:
    """Restrict the issue groups to the ones the user picks.

    The user is only asked when choosing or overlaying; otherwise every group
    is kept.

    Raises:
        SelectError: If the prompt fails or is aborted
    """
    if not choose and not overlay:
        return group_map

    if chooser is None:
        from ..interact import prompt_user
        chooser = prompt_user

    whitelist = chooser(list(group_map.keys()))
    logger.info(f"Selected {len(whitelist)} of {len(group_map)} issue groups")
    return {group: commits for group, commits in group_map.items() if group in whitelist}


def apply_overlay(group_map: IssueGroupMap, overlay: bool) -> IssueGroupMap:
    """Combine every issue group into the first one when overlaying."""
    if not overlay or not group_map:
        return group_map

    first_group = next(iter(group_map))
    commits: List[Commit] = []
    for group_commits in group_map.values():
        commits.extend(group_commits)
    return {first_group: commits}

