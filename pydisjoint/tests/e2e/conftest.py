"""Configuration for e2e tests."""

import logging
import stat
from pathlib import Path

import pytest

from pydisjoint.tests.e2e.helpers import RepoContext, create_repo_context

logger = logging.getLogger(__name__)

EDITOR_SCRIPT = """#!/bin/sh
# Writes a title and description above the template
printf 'Login work\\n\\nEverything about logging in.\\n' | cat - "$1" > "$1.new" && mv "$1.new" "$1"
"""


@pytest.fixture
def repo_ctx(tmp_path: Path) -> RepoContext:
    """A clone of a bare remote, checked out on a "feature" branch off main."""
    ctx = create_repo_context(tmp_path)
    logger.info(f"Created test repository in {ctx.repo_dir}")
    return ctx


@pytest.fixture
def editor(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An EDITOR that fills in the pull request message without a terminal."""
    script = tmp_path / "editor.sh"
    script.write_text(EDITOR_SCRIPT)
    script.chmod(script.stat().st_mode | stat.S_IEXEC)
    monkeypatch.delenv("VISUAL", raising=False)
    monkeypatch.setenv("EDITOR", str(script))
    return script
