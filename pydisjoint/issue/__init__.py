"""Issue references parsed from commit trailers."""

import re
from typing import Optional

from ..typing import Issue, IssueKind

# "Ticket: AB-123", optionally written as "Closes Ticket: AB-123"
TICKET_TRAILER_REGEX = re.compile(r'^(?:Closes[ \t]+)?Ticket:[ \t]+(\S+)', re.MULTILINE)
# "Fixes #123", "closes #7", ...
GITHUB_TRAILER_REGEX = re.compile(
    r'^(?:closes|close|closed|fixes|fixed)[ \t]+#(\d+)', re.MULTILINE | re.IGNORECASE
)


def parse_issue(commit_message: str) -> Optional[Issue]:
    """Parse the issue a commit message refers to, if any.

    A ticket trailer wins over a GitHub closing keyword when a message has both.
    """
    match = TICKET_TRAILER_REGEX.search(commit_message)
    if match:
        return Issue(IssueKind.TICKET, match.group(1))
    match = GITHUB_TRAILER_REGEX.search(commit_message)
    if match:
        return Issue(IssueKind.GITHUB, match.group(1))
    return None
