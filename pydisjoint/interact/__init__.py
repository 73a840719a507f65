"""Interactive selection of issue groups."""

import re
from typing import Optional, Sequence, Set

from rich.console import Console
from rich.prompt import Prompt

from ..errors import SelectError
from ..typing import IssueGroup

console = Console(stderr=True)


def parse_selection(answer: str, count: int) -> Set[int]:
    """Parse a selection like "1, 3 4" into zero-based indices.

    "all" selects everything and an empty answer selects nothing.

    Raises:
        SelectError: If the answer names something that is not on the menu
    """
    answer = answer.strip()
    if not answer:
        return set()
    if answer.lower() == "all":
        return set(range(count))

    indices: Set[int] = set()
    for token in re.split(r'[\s,]+', answer):
        if not token:
            continue
        if not token.isdigit() or not 1 <= int(token) <= count:
            raise SelectError(f"invalid selection {token!r}: expected a number from 1 to {count}")
        indices.add(int(token) - 1)
    return indices


def prompt_user(issue_groups: Sequence[IssueGroup],
                prompt_console: Optional[Console] = None) -> Set[IssueGroup]:
    """Ask the user which issue groups to create pull requests for."""
    out = prompt_console or console
    out.print()
    out.print("[bold]Select the issues to create PRs for:[/bold]")
    for i, issue_group in enumerate(issue_groups):
        out.print(f"  [{i + 1}] {issue_group}", markup=False)

    try:
        answer = Prompt.ask("Issues (numbers separated by spaces or commas, 'all', or blank for none)",
                            default="", show_default=False, console=out)
    except (EOFError, KeyboardInterrupt) as e:
        raise SelectError("issue selection aborted") from e

    chosen = {issue_groups[i] for i in parse_selection(answer, len(issue_groups))}
    out.print(f"Selected: {', '.join(str(group) for group in issue_groups if group in chosen) or 'nothing'}",
              markup=False)
    return chosen
