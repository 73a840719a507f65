"""Pull request titles and descriptions."""

import os
import logging
from pathlib import Path
from typing import List, Optional, Sequence

import click
from pydantic import BaseModel

from ..errors import EditorError
from ..typing import Commit

# Get module logger
logger = logging.getLogger(__name__)

IGNORE_MARKER = "# ------------------------ >8 ------------------------"

PULL_REQUEST_INSTRUCTIONS = """
# Do not modify or remove the line above.
# Everything below it will be ignored.

Write a message for this pull request. The first block
of text is the title and the rest is the description.

Changes:
"""

MESSAGE_FILE_NAME = "PULLREQ_MSG"


class PullRequestMetadata(BaseModel):
    """Title and description of a pull request."""
    title: str
    body: str

    @classmethod
    def from_text(cls, text: str) -> 'PullRequestMetadata':
        """First line is the title, everything after it the description."""
        lines = text.splitlines()
        title = lines[0].strip() if lines else ""
        body = "\n".join(lines[1:]).strip()
        return cls(title=title, body=body)


def metadata_from_commit(commit: Commit) -> PullRequestMetadata:
    """Use a lone commit's message as the pull request metadata."""
    return PullRequestMetadata.from_text(commit.message or "")


class PullRequestMessageTemplate:
    """Text the user edits to describe a pull request of several commits."""

    def __init__(self, commits: Sequence[Commit]):
        self.commits = list(commits)

    def __str__(self) -> str:
        parts: List[str] = [f"\n{IGNORE_MARKER}\n{PULL_REQUEST_INSTRUCTIONS}"]
        for commit in self.commits:
            author = commit.author_name or "unknown"
            parts.append(f'{commit.short_hash} ("{author}")\n')
            for line in (commit.message or "").splitlines():
                parts.append(f"    {line}\n")
            parts.append("\n")
        return "".join(parts)


def parse_pull_request_message(content: str) -> PullRequestMetadata:
    """Parse an edited message, ignoring everything from the marker on.

    Raises:
        EditorError: If nothing is left once the ignored part is dropped
    """
    kept: List[str] = []
    for line in content.splitlines():
        if line == IGNORE_MARKER:
            break
        kept.append(line)
    message = "\n".join(kept)

    # An empty message means the user wants to abort
    if not message.strip():
        raise EditorError("pull request metadata is empty -- aborting")
    return PullRequestMetadata.from_text(message)


def get_editor() -> Optional[str]:
    return os.environ.get("VISUAL") or os.environ.get("EDITOR")


def interactive_get_pr_metadata(root: Path, commits: Sequence[Commit]) -> PullRequestMetadata:
    """Ask the user to write a pull request title and description in their editor.

    The template is written to ``.git/PULLREQ_MSG`` under ``root`` and read
    back once the editor exits.

    Raises:
        EditorError: If no editor is configured, the message file cannot be
            written or read, the editor fails, or the message is empty
    """
    editor = get_editor()
    if not editor:
        raise EditorError("unknown editor -- user should set VISUAL or EDITOR environment variable")

    file_path = Path(root) / ".git" / MESSAGE_FILE_NAME
    try:
        file_path.write_text(str(PullRequestMessageTemplate(commits)))
    except OSError as e:
        raise EditorError(f"error writing to .git/{MESSAGE_FILE_NAME} file") from e

    logger.info(f"> {editor} {file_path}")
    try:
        click.edit(filename=str(file_path), editor=editor)
    except click.ClickException as e:
        raise EditorError("error invoking editor") from e

    try:
        content = file_path.read_text()
    except (OSError, UnicodeDecodeError) as e:
        raise EditorError(f"error reading .git/{MESSAGE_FILE_NAME} file") from e

    return parse_pull_request_message(content)
