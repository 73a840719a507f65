"""Config parser logic."""

import re
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from ...errors import ExecuteError, RepositoryStateError
from ...git import GitRepository

# Get module logger
logger = logging.getLogger(__name__)

RepoConfig = Dict[str, Any]  # Use Any since yaml can return various types
Config = Dict[str, RepoConfig]

CONFIG_FILE_NAME = '.git-disjoint.yaml'

# git@github.com:owner/name.git, ssh://git@github.com/owner/name, https://github.com/owner/name.git
REMOTE_URL_REGEX = re.compile(r'[:/](?P<owner>[^/:]+)/(?P<name>[^/]+?)(?:\.git)?/?$')


def parse_remote_url(remote_url: str) -> Optional[Tuple[str, str]]:
    """Extract (owner, name) from a GitHub remote url."""
    match = REMOTE_URL_REGEX.search(remote_url.strip())
    if not match:
        return None
    return match.group('owner'), match.group('name')


def choose_push_remote(remotes: List[str], default: str) -> str:
    """Push to a remote named "fork" when there is one, else the default remote."""
    if "fork" in remotes:
        return "fork"
    if default in remotes:
        return default
    raise RepositoryStateError(
        f"unable to choose a git remote to push to, expected to find a remote named 'fork' or '{default}'")


def parse_config(repository: GitRepository) -> Config:
    """Parse config from defaults, the repository config file and git remotes."""
    config: Config = {
        'repo': {
            'github_remote': 'origin',
            'github_host': 'github.com',
        },
        'user': {},
        'tool': {
            'concurrency': 4,
        }
    }

    # Try to load .git-disjoint.yaml from repository root
    config_path = Path(repository.root) / CONFIG_FILE_NAME
    try:
        with open(config_path, 'r') as f:
            logger.info(f"Found {CONFIG_FILE_NAME}, loading...")
            file_config = yaml.safe_load(f)
            logger.debug(f"Config from {CONFIG_FILE_NAME}: {file_config}")
            if isinstance(file_config, dict):
                for section in ('repo', 'user', 'tool'):
                    if isinstance(file_config.get(section), dict):
                        config[section].update(file_config[section])
    except FileNotFoundError:
        logger.debug(f"No {CONFIG_FILE_NAME} found, using defaults")

    repo = config['repo']
    remote = repo['github_remote']
    if not repo.get('push_remote'):
        repo['push_remote'] = choose_push_remote(repository.remotes(), remote)

    # Extract repo owner/name from the upstream remote if not in config
    if not repo.get('github_repo_owner') or not repo.get('github_repo_name'):
        try:
            parsed = parse_remote_url(repository.remote_url(remote))
        except ExecuteError as e:
            raise RepositoryStateError(f"unable to read url of remote {remote!r}") from e
        if parsed is None:
            raise RepositoryStateError(f"unable to parse url of remote {remote!r}")
        repo['github_repo_owner'] = repo.get('github_repo_owner') or parsed[0]
        repo['github_repo_name'] = repo.get('github_repo_name') or parsed[1]

    # The fork owner is who the pull request comes from
    if not repo.get('github_forker'):
        push_remote = repo['push_remote']
        if push_remote == remote:
            repo['github_forker'] = repo['github_repo_owner']
        else:
            parsed = parse_remote_url(repository.remote_url(push_remote))
            if parsed is None:
                raise RepositoryStateError(f"unable to parse url of remote {push_remote!r}")
            repo['github_forker'] = parsed[0]

    return config
