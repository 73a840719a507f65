"""Git interfaces and implementation."""

import os
import logging
import shlex
from pathlib import Path
from typing import List, Optional

import git
from git.exc import (
    AmbiguousObjectName, BadName, BadObject, GitCommandError, GitCommandNotFound,
    InvalidGitRepositoryError, NoSuchPathError,
)

from ..errors import ExecuteError, RepositoryStateError
from ..typing import BranchName, Commit, CommitHash, GitInterface

# Get module logger
logger = logging.getLogger(__name__)

# Files git leaves behind while an operation is in progress
IN_PROGRESS_MARKERS = {
    "MERGE_HEAD": "merge",
    "CHERRY_PICK_HEAD": "cherry-pick",
    "REVERT_HEAD": "revert",
    "BISECT_LOG": "bisect",
    "rebase-merge": "rebase",
    "rebase-apply": "rebase",
}


def raw_message(commit: git.Commit) -> bytes:
    """Message bytes of ``commit`` exactly as stored in the object database."""
    data = commit.repo.odb.stream(commit.binsha).read()
    # Headers end at the first empty line
    _, _, message = data.partition(b"\n\n")
    return message


def decode_message(commit: git.Commit) -> Optional[str]:
    """Decode a commit message strictly, or None if it is not valid text.

    GitPython replaces undecodable bytes, so the raw object is read instead.
    """
    try:
        return raw_message(commit).decode(commit.encoding or "UTF-8")
    except (UnicodeDecodeError, LookupError):
        logger.debug(f"Commit {commit.hexsha} has a message that is not valid {commit.encoding}")
        return None


def commit_from_git(commit: git.Commit) -> Commit:
    """Convert a GitPython commit into our read-only view."""
    message = decode_message(commit)
    return Commit(
        commit_hash=CommitHash(commit.hexsha),
        message=message,
        author_name=commit.author.name or "",
        author_email=commit.author.email or "",
    )


class RealGit:
    """Real Git implementation."""
    def __init__(self, repo: git.Repo):
        """Initialize with the repository commands run in."""
        self.repo = repo

    def run_cmd(self, command: str) -> str:
        """Run git command."""
        cmd_str = command.strip()
        cmd_parts = shlex.split(cmd_str)

        # Always log git commands
        logger.info(f"> git {cmd_str}")
        try:
            # Convert command to method call
            git_command = cmd_parts[0]
            git_args = cmd_parts[1:]
            method = getattr(self.repo.git, git_command.replace('-', '_'))
            result = method(*git_args)
        except GitCommandNotFound as e:
            raise ExecuteError(f"unable to execute command: git {cmd_str}", ["git"] + cmd_parts) from e
        except GitCommandError as e:
            logger.debug(f"git {cmd_str} failed with status {e.status}: {e.stderr.strip() if isinstance(e.stderr, str) else e.stderr}")
            raise ExecuteError(f"child process exited with non-zero code: git {cmd_str}",
                               ["git"] + cmd_parts) from e
        output = result if isinstance(result, str) else str(result)
        if output:
            logger.debug(output)
        return output

    def must_git(self, command: str) -> str:
        """Run git command, failing on error."""
        return self.run_cmd(command)


class GitRepository:
    """The local repository git-disjoint reorganizes."""

    def __init__(self, repo: git.Repo, git_cmd: Optional[GitInterface] = None):
        self.repo = repo
        self.git_cmd = git_cmd or RealGit(repo)

    @classmethod
    def open(cls, directory: Optional[str] = None) -> 'GitRepository':
        """Open the repository containing ``directory`` (default: cwd)."""
        path = directory or os.getcwd()
        try:
            repo = git.Repo(path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise RepositoryStateError(f"not in a git repository: {path}") from e
        return cls(repo)

    @property
    def root(self) -> Path:
        return Path(self.repo.working_tree_dir or self.repo.git_dir)

    @property
    def git_dir(self) -> Path:
        return Path(self.repo.git_dir)

    def check_clean_state(self) -> None:
        """Fail unless the working tree is clean and no operation is underway."""
        for marker, operation in IN_PROGRESS_MARKERS.items():
            if (self.git_dir / marker).exists():
                raise RepositoryStateError(
                    f"repository is in the middle of a {operation} -- finish or abort it first")
        if self.repo.is_dirty(index=True, working_tree=True, untracked_files=False):
            raise RepositoryStateError(
                "working tree has uncommitted changes -- commit or stash them first")

    def resolve(self, ref: str) -> git.Commit:
        """Resolve a ref to a commit."""
        try:
            return self.repo.commit(ref)
        except (AmbiguousObjectName, BadName, BadObject, ValueError) as e:
            raise RepositoryStateError(f"unable to resolve {ref!r} to a commit") from e

    def commits_since_base(self, base: git.Commit) -> List[Commit]:
        """Commits from ``base`` (exclusive) to HEAD, ordered parent-first."""
        commits: List[Commit] = []
        # Walk child-first from HEAD until we reach the base
        for commit in self.repo.iter_commits("HEAD", topo_order=True):
            if commit.hexsha == base.hexsha:
                break
            commits.append(commit_from_git(commit))
        commits.reverse()
        logger.info(f"Found {len(commits)} commits since {base.hexsha[:8]}")
        return commits

    def current_ref(self) -> str:
        """Name of the checked-out branch, or the commit hash when detached."""
        if self.repo.head.is_detached:
            return self.repo.head.commit.hexsha
        return self.repo.active_branch.name

    def branch_exists(self, branch_name: BranchName) -> bool:
        """Check the local ref namespace for a branch."""
        return any(head.name == branch_name for head in self.repo.heads)

    def create_branch(self, branch_name: BranchName, base: git.Commit) -> None:
        """Create a branch at ``base`` and check it out."""
        logger.info(f"> git branch {branch_name} {base.hexsha[:8]}")
        try:
            self.repo.create_head(branch_name, base)
        except (GitCommandError, OSError, ValueError) as e:
            raise ExecuteError(f"unable to create branch {branch_name}") from e
        self.checkout(branch_name)

    def checkout(self, ref: str) -> None:
        self.git_cmd.must_git(f"checkout {ref}")

    def cherry_pick(self, commit: Commit) -> None:
        """Apply a commit on top of HEAD, keeping it even if it turns out empty."""
        self.git_cmd.must_git(f"cherry-pick --allow-empty {commit.commit_hash}")

    def abort_cherry_pick(self) -> None:
        if (self.git_dir / "CHERRY_PICK_HEAD").exists():
            self.git_cmd.run_cmd("cherry-pick --abort")

    def push(self, remote: str, branch_name: BranchName) -> None:
        self.git_cmd.must_git(f"push {remote} {branch_name}")

    def remote_url(self, remote: str) -> str:
        return self.git_cmd.must_git(f"remote get-url {remote}").strip()

    def remotes(self) -> List[str]:
        return [remote.name for remote in self.repo.remotes]

    def remote_head_branch(self, remote: str) -> Optional[str]:
        """Branch the remote's HEAD points at, read from local refs."""
        try:
            ref = self.git_cmd.must_git(f"symbolic-ref --short refs/remotes/{remote}/HEAD").strip()
        except ExecuteError:
            return None
        prefix = f"{remote}/"
        return ref[len(prefix):] if ref.startswith(prefix) else ref
