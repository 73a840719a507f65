"""Tests for the GitHub client wrapper."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from github import GithubException

from pydisjoint.config import Config
from pydisjoint.editor import PullRequestMetadata
from pydisjoint.errors import PullRequestError
from pydisjoint.github import GitHubClient, api_url, find_github_token
from pydisjoint.typing import BranchName

METADATA = PullRequestMetadata(title="Fix login", body="Ticket: AB-1")


def make_config(**repo: str) -> Config:
    settings = {
        'github_repo_owner': 'octo',
        'github_repo_name': 'widgets',
        'github_forker': 'me',
    }
    settings.update(repo)
    return Config({'repo': settings})


def make_client() -> MagicMock:
    client = MagicMock()
    client.get_repo.return_value.default_branch = "main"
    client.get_repo.return_value.create_pull.return_value.html_url = "https://github.com/octo/widgets/pull/1"
    return client


class TestCreatePullRequest:
    """Tests for GitHubClient.create_pull_request."""

    def test_creates_draft_from_fork(self) -> None:
        config = make_config()
        client = make_client()
        github = GitHubClient(config, client)

        url = github.create_pull_request(BranchName("ab-1-fix-login"), METADATA, "main")

        assert url == "https://github.com/octo/widgets/pull/1"
        client.get_repo.assert_called_once_with("octo/widgets")
        client.get_repo.return_value.create_pull.assert_called_once_with(
            title="Fix login", body="Ticket: AB-1", head="me:ab-1-fix-login", base="main", draft=True)

    def test_repository_is_fetched_once(self) -> None:
        config = make_config()
        client = make_client()
        github = GitHubClient(config, client)

        github.create_pull_request(BranchName("a"), METADATA, "main")
        github.create_pull_request(BranchName("b"), METADATA, "main")
        assert client.get_repo.call_count == 1

    def test_http_error_names_the_url(self) -> None:
        config = make_config()
        client = make_client()
        client.get_repo.return_value.create_pull.side_effect = GithubException(422, {"message": "Validation Failed"})
        github = GitHubClient(config, client)

        with pytest.raises(PullRequestError) as exc_info:
            github.create_pull_request(BranchName("a"), METADATA, "main")

        assert exc_info.value.url == "https://api.github.com/repos/octo/widgets/pulls"
        assert "http error: POST https://api.github.com/repos/octo/widgets/pulls" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, GithubException)

    def test_response_without_url(self) -> None:
        config = make_config()
        client = make_client()
        client.get_repo.return_value.create_pull.return_value.html_url = None
        github = GitHubClient(config, client)

        with pytest.raises(PullRequestError, match="unable to parse response"):
            github.create_pull_request(BranchName("a"), METADATA, "main")

    def test_enterprise_host(self) -> None:
        config = make_config(github_host="github.example.com")
        client = make_client()
        client.get_repo.return_value.create_pull.side_effect = GithubException(500, None)
        github = GitHubClient(config, client)

        with pytest.raises(PullRequestError) as exc_info:
            github.create_pull_request(BranchName("a"), METADATA, "main")
        assert exc_info.value.url == "https://github.example.com/api/v3/repos/octo/widgets/pulls"


class TestDefaultBranch:
    """Tests for GitHubClient.default_branch."""

    def test_default_branch(self) -> None:
        config = make_config()
        assert GitHubClient(config, make_client()).default_branch() == "main"

    def test_repository_lookup_fails(self) -> None:
        config = make_config()
        client = make_client()
        client.get_repo.side_effect = GithubException(404, {"message": "Not Found"})

        with pytest.raises(PullRequestError, match="http error: GET"):
            GitHubClient(config, client).default_branch()

    def test_without_client(self) -> None:
        github = GitHubClient(make_config())
        assert github.available is False
        with pytest.raises(PullRequestError):
            github.default_branch()


class TestFindGithubToken:
    """Tests for find_github_token."""

    def test_environment_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_TOKEN", "env-token")
        assert find_github_token() == "env-token"

    def test_gh_hosts_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        hosts = tmp_path / ".config" / "gh" / "hosts.yml"
        hosts.parent.mkdir(parents=True)
        hosts.write_text("github.com:\n  oauth_token: gh-token\n  user: me\n")

        assert find_github_token() == "gh-token"
        assert find_github_token("github.example.com") is None

    def test_nothing_found(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert find_github_token() is None


def test_api_url() -> None:
    assert api_url("github.com") == "https://api.github.com"
    assert api_url("github.example.com") == "https://github.example.com/api/v3"
