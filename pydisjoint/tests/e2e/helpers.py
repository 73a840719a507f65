"""Helpers for e2e tests against real temporary git repositories."""

import io
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

from rich.console import Console

from pydisjoint.config import Config
from pydisjoint.config.config_parser import parse_config
from pydisjoint.disjoint import GitDisjoint
from pydisjoint.git import GitRepository
from pydisjoint.github import GitHubClient
from pydisjoint.pretty import ProgressDisplay
from pydisjoint.tests.e2e.fake_pygithub import FakeGithub

log = logging.getLogger(__name__)


def run_git(cwd: Path, *args: str, check: bool = True) -> str:
    """Run a git command and return its stripped output."""
    log.debug(f"Running command: git {' '.join(args)}")
    result = subprocess.run(["git", *args], cwd=cwd, check=check, capture_output=True, text=True)
    if result.stderr:
        log.debug(f"Command stderr: {result.stderr.strip()}")
    return result.stdout.strip()


@dataclass
class RepoContext:
    """A working repository cloned from a bare "remote", plus a fake GitHub."""
    repo_dir: Path
    remote_dir: Path
    github_client: FakeGithub

    def git(self, *args: str, check: bool = True) -> str:
        return run_git(self.repo_dir, *args, check=check)

    def make_commit(self, file: str, content: str, msg: str) -> str:
        """Write a file and commit it; returns the new commit hash."""
        (self.repo_dir / file).write_text(f"{content}\n")
        self.git("add", file)
        self.git("commit", "-q", "-m", msg)
        return self.git("rev-parse", "HEAD")

    def make_raw_commit(self, file: str, content: str, msg: bytes) -> str:
        """Like make_commit, but the message is written byte for byte."""
        (self.repo_dir / file).write_text(f"{content}\n")
        message_file = self.repo_dir.parent / "COMMIT_MSG"
        message_file.write_bytes(msg)
        self.git("add", file)
        self.git("commit", "-q", "--cleanup=verbatim", "-F", str(message_file))
        return self.git("rev-parse", "HEAD")

    def branches(self) -> List[str]:
        return self.git("for-each-ref", "--format=%(refname:short)", "refs/heads").splitlines()

    def remote_branches(self) -> List[str]:
        return run_git(self.remote_dir, "for-each-ref", "--format=%(refname:short)", "refs/heads").splitlines()

    def log_subjects(self, ref: str, base: str = "main") -> List[str]:
        """Subjects of the commits on ``ref`` since ``base``, oldest first."""
        return self.git("log", "--reverse", "--format=%s", f"{base}..{ref}").splitlines()

    def current_branch(self) -> str:
        return self.git("rev-parse", "--abbrev-ref", "HEAD")

    def config(self, **tool: Any) -> Config:
        cfg = parse_config(GitRepository.open(str(self.repo_dir)))
        cfg['user']['open_browser'] = False
        cfg['tool'].update({'base': 'main'})
        cfg['tool'].update(tool)
        return Config(cfg)

    def disjoint(self, **tool: Any) -> GitDisjoint:
        config = self.config(**tool)
        repository = GitRepository.open(str(self.repo_dir))
        github = GitHubClient(config, self.github_client)
        display = ProgressDisplay(Console(file=io.StringIO(), force_terminal=False))
        disjoint = GitDisjoint(config, repository, github, display)
        disjoint.dry_run_delay = 0.01
        return disjoint


def create_repo_context(tmp_path: Path, editor: Optional[str] = None) -> RepoContext:
    """Create a bare remote at <tmp>/octo/widgets.git and a clone with one commit on main."""
    remote_dir = tmp_path / "octo" / "widgets.git"
    remote_dir.mkdir(parents=True)
    run_git(remote_dir, "init", "-q", "--bare")
    run_git(remote_dir, "symbolic-ref", "HEAD", "refs/heads/main")

    repo_dir = tmp_path / "work"
    repo_dir.mkdir()
    run_git(repo_dir, "init", "-q")
    run_git(repo_dir, "symbolic-ref", "HEAD", "refs/heads/main")
    run_git(repo_dir, "config", "user.name", "Test User")
    run_git(repo_dir, "config", "user.email", "test@example.com")
    run_git(repo_dir, "config", "commit.gpgsign", "false")
    run_git(repo_dir, "remote", "add", "origin", str(remote_dir))

    ctx = RepoContext(repo_dir=repo_dir, remote_dir=remote_dir, github_client=FakeGithub())
    ctx.make_commit("README", "widgets", "Initial commit")
    ctx.git("push", "-q", "origin", "main")
    ctx.git("checkout", "-q", "-b", "feature")
    return ctx
