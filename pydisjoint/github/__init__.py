"""GitHub interfaces and implementation."""

import os
import logging
from pathlib import Path
from typing import Dict, Optional, Protocol, runtime_checkable

import yaml
from pydantic import BaseModel

from ..config.models import DisjointConfig
from ..editor import PullRequestMetadata
from ..errors import PullRequestError
from ..typing import BranchName
from ..util import ensure

# Get module logger
logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"


class CreatePullRequest(BaseModel):
    """Body of POST /repos/{owner}/{repo}/pulls."""
    title: str
    body: str
    head: str
    base: str
    draft: bool = True


# Define protocols for GitHub objects
@runtime_checkable
class GitHubPullRequestProtocol(Protocol):
    """Protocol for GitHub pull request objects (real or fake)."""
    @property
    def number(self) -> int:
        """Get the PR number."""
        ...

    @property
    def html_url(self) -> str:
        """Get the web page of the PR."""
        ...


@runtime_checkable
class GitHubRepoProtocol(Protocol):
    """Protocol for GitHub repository objects (real or fake)."""
    @property
    def default_branch(self) -> str:
        """Get the branch pull requests target by default."""
        ...

    def create_pull(self, title: str, body: str, base: str, head: str,
                    maintainer_can_modify: bool = True, draft: bool = False) -> GitHubPullRequestProtocol:
        """Create a new pull request."""
        ...


@runtime_checkable
class PyGithubProtocol(Protocol):
    """Protocol for PyGithub implementations (real or fake).

    ``github.Github`` satisfies this protocol directly.
    """
    def get_repo(self, full_name_or_id: str) -> GitHubRepoProtocol:
        """Get a repository by full name or ID."""
        ...


def find_github_token(host: str = "github.com") -> Optional[str]:
    """Find GitHub token from env var or gh CLI config."""
    # First try environment variable
    token = os.environ.get("GITHUB_TOKEN")
    if token:
        return token

    # Then try gh CLI config at ~/.config/gh/hosts.yml
    try:
        gh_config_path = Path.home() / ".config" / "gh" / "hosts.yml"
        if gh_config_path.exists():
            with open(gh_config_path, "r") as f:
                gh_config = yaml.safe_load(f)
                if gh_config and host in gh_config:
                    github_config: Dict[str, object] = gh_config[host]
                    token = github_config.get("oauth_token")
                    if isinstance(token, str):
                        return token
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Error reading gh CLI config: {e}")

    return None


def api_url(host: str) -> str:
    """REST API root for github.com or a GitHub Enterprise host."""
    if host == "github.com":
        return GITHUB_API_URL
    return f"https://{host}/api/v3"


def create_github_client(token: str, host: str = "github.com") -> PyGithubProtocol:
    """Create a real PyGithub client authenticated with ``token``."""
    from github import Auth, Github

    return Github(base_url=api_url(host), auth=Auth.Token(token))


class GitHubClient:
    """GitHub client implementation."""
    def __init__(self, config: DisjointConfig, github_client: Optional[PyGithubProtocol] = None):
        """Initialize with config and GitHub client implementation.

        Args:
            config: The configuration
            github_client: GitHub client implementation (real or fake).
                           None is only valid for dry runs that never talk to GitHub.
        """
        self.config = config
        self.client = github_client
        self._repo: Optional[GitHubRepoProtocol] = None

    @property
    def available(self) -> bool:
        """Whether there is a client to talk to GitHub with."""
        return self.client is not None or self._repo is not None

    @property
    def full_name(self) -> str:
        owner = ensure(self.config.repo.github_repo_owner, "github_repo_owner")
        name = ensure(self.config.repo.github_repo_name, "github_repo_name")
        return f"{owner}/{name}"

    @property
    def pulls_url(self) -> str:
        """REST endpoint pull requests are created at."""
        repo = self.config.repo
        return f"{api_url(repo.github_host)}/repos/{repo.github_repo_owner}/{repo.github_repo_name}/pulls"

    @property
    def repo(self) -> GitHubRepoProtocol:
        """Get GitHub repository."""
        if self._repo is None:
            url = f"{api_url(self.config.repo.github_host)}/repos/{self.full_name}"
            if self.client is None:
                raise PullRequestError(f"no GitHub client available for GET {url}", url)
            logger.info(f"> github get repo {self.full_name}")
            try:
                self._repo = self.client.get_repo(self.full_name)
            except Exception as e:
                raise PullRequestError(f"http error: GET {url}", url) from e
        return self._repo

    @repo.setter
    def repo(self, value: GitHubRepoProtocol) -> None:
        """Set the GitHub repository."""
        self._repo = value

    def default_branch(self) -> str:
        """Get the repository's default branch from the GitHub API."""
        url = f"{api_url(self.config.repo.github_host)}/repos/{self.full_name}"
        try:
            branch = self.repo.default_branch
        except PullRequestError:
            raise
        except Exception as e:
            raise PullRequestError(f"unable to parse response from GET {url}", url) from e
        if not branch:
            raise PullRequestError(f"unable to parse response from GET {url}", url)
        return branch

    def create_pull_request(self, branch_name: BranchName, metadata: PullRequestMetadata,
                            base: str) -> str:
        """Create a draft pull request for ``branch_name`` and return its web URL."""
        url = self.pulls_url
        forker = ensure(self.config.repo.github_forker, "github_forker")
        request = CreatePullRequest(
            title=metadata.title,
            body=metadata.body,
            head=f"{forker}:{branch_name}",
            base=base,
        )
        logger.info(f"> github create pull request {request.head} -> {base} : {request.title}")
        try:
            pr = self.repo.create_pull(**request.model_dump())
        except PullRequestError:
            raise
        except Exception as e:
            raise PullRequestError(f"http error: POST {url}", url) from e

        html_url = getattr(pr, "html_url", None)
        if not isinstance(html_url, str) or not html_url:
            raise PullRequestError(f"unable to parse response from POST {url}", url)
        logger.info(f"Created pull request {html_url}")
        return html_url
