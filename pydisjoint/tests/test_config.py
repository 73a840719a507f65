"""Tests for config models and the config parser."""

from pathlib import Path
from typing import Dict, List
from unittest.mock import MagicMock

import pydantic
import pytest

from pydisjoint.config import Config, default_config
from pydisjoint.config.config_parser import choose_push_remote, parse_config, parse_remote_url
from pydisjoint.errors import ExecuteError, RepositoryStateError


def make_repository(root: Path, remotes: Dict[str, str]) -> MagicMock:
    repository = MagicMock()
    repository.root = root
    repository.remotes.return_value = list(remotes)

    def remote_url(name: str) -> str:
        if name not in remotes:
            raise ExecuteError(f"child process exited with non-zero code: git remote get-url {name}")
        return remotes[name]

    repository.remote_url.side_effect = remote_url
    return repository


class TestParseRemoteUrl:
    """Tests for parse_remote_url."""

    @pytest.mark.parametrize("url", [
        "git@github.com:octo/widgets.git",
        "git@github.com:octo/widgets",
        "https://github.com/octo/widgets.git",
        "https://github.com/octo/widgets/",
        "ssh://git@github.com/octo/widgets.git",
    ])
    def test_owner_and_name(self, url: str) -> None:
        assert parse_remote_url(url) == ("octo", "widgets")

    def test_unparseable(self) -> None:
        assert parse_remote_url("widgets") is None


class TestChoosePushRemote:
    """Tests for choose_push_remote."""

    def test_prefers_fork(self) -> None:
        assert choose_push_remote(["origin", "fork"], "origin") == "fork"

    def test_falls_back_to_default(self) -> None:
        assert choose_push_remote(["upstream", "origin"], "origin") == "origin"

    def test_neither(self) -> None:
        remotes: List[str] = ["upstream"]
        with pytest.raises(RepositoryStateError, match="'fork' or 'origin'"):
            choose_push_remote(remotes, "origin")


class TestParseConfig:
    """Tests for parse_config."""

    def test_defaults_from_origin(self, tmp_path: Path) -> None:
        repository = make_repository(tmp_path, {"origin": "git@github.com:octo/widgets.git"})
        config = Config(parse_config(repository))

        assert config.repo.github_remote == "origin"
        assert config.repo.push_remote == "origin"
        assert config.repo.github_repo_owner == "octo"
        assert config.repo.github_repo_name == "widgets"
        assert config.repo.github_forker == "octo"
        assert config.tool.concurrency == 4
        assert config.user.open_browser is True

    def test_fork_owner_is_the_forker(self, tmp_path: Path) -> None:
        repository = make_repository(tmp_path, {
            "origin": "https://github.com/octo/widgets.git",
            "fork": "git@github.com:me/widgets.git",
        })
        config = Config(parse_config(repository))

        assert config.repo.push_remote == "fork"
        assert config.repo.effective_push_remote == "fork"
        assert config.repo.github_repo_owner == "octo"
        assert config.repo.github_forker == "me"

    def test_config_file_overrides(self, tmp_path: Path) -> None:
        (tmp_path / ".git-disjoint.yaml").write_text(
            "repo:\n"
            "  github_branch: develop\n"
            "user:\n"
            "  open_browser: false\n"
            "tool:\n"
            "  concurrency: 2\n"
        )
        repository = make_repository(tmp_path, {"origin": "git@github.com:octo/widgets.git"})
        config = Config(parse_config(repository))

        assert config.repo.github_branch == "develop"
        assert config.user.open_browser is False
        assert config.tool.concurrency == 2

    def test_config_file_names_the_repository(self, tmp_path: Path) -> None:
        (tmp_path / ".git-disjoint.yaml").write_text(
            "repo:\n  github_repo_owner: acme\n  github_repo_name: rockets\n")
        repository = make_repository(tmp_path, {"origin": "/srv/git/whatever"})
        config = Config(parse_config(repository))

        assert (config.repo.github_repo_owner, config.repo.github_repo_name) == ("acme", "rockets")
        repository.remote_url.assert_not_called()

    def test_unparseable_origin(self, tmp_path: Path) -> None:
        repository = make_repository(tmp_path, {"origin": "widgets"})
        with pytest.raises(RepositoryStateError, match="origin"):
            parse_config(repository)

    def test_no_remotes(self, tmp_path: Path) -> None:
        repository = make_repository(tmp_path, {})
        with pytest.raises(RepositoryStateError):
            parse_config(repository)


class TestConfigModels:
    """Tests for the pydantic config models."""

    def test_default_config(self) -> None:
        config = default_config()
        assert config.repo.github_remote == "origin"
        assert config.tool.dry_run is False
        assert config.tool.base is None

    def test_concurrency_must_be_positive(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            Config({'tool': {'concurrency': 0}})

    def test_extra_fields_are_kept(self) -> None:
        config = Config({'user': {'theme': 'dark'}})
        assert config.user.model_extra == {'theme': 'dark'}
