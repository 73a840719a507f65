"""CLI entry point."""

import sys
import logging
from typing import Any, Dict, Optional

import click

from ... import setup_logging
from ...config import Config
from ...config.config_parser import parse_config
from ...disjoint import ExecutionReport, GitDisjoint
from ...errors import DisjointError, render_error
from ...git import GitRepository
from ...github import GitHubClient, create_github_client, find_github_token
from ...log_file import LogFile
from ...pretty import ProgressDisplay

# Get module logger
logger = logging.getLogger(__name__)


class MissingTokenError(DisjointError):
    """No GitHub token could be found."""


def build_config(repository: GitRepository, flags: Dict[str, Any]) -> Config:
    """Parse the repository config and lay the command-line flags over it."""
    cfg = parse_config(repository)
    tool = cfg['tool']
    for key, value in flags.items():
        # Unset flags never override the config file
        if value:
            tool[key] = value
    return Config(cfg)


def build_github(config: Config, github_token: Optional[str]) -> GitHubClient:
    host = config.repo.github_host
    token = github_token or find_github_token(host)
    if token:
        return GitHubClient(config, create_github_client(token, host))
    if config.tool.dry_run:
        logger.info("No GitHub token found, continuing dry run without GitHub")
        return GitHubClient(config)
    raise MissingTokenError(
        "no GitHub token found -- set GITHUB_TOKEN, pass --github-token or log in with 'gh auth login'")


def print_report(report: ExecutionReport, display: ProgressDisplay) -> None:
    for branch_name in report.skipped:
        display.console.print(f"[yellow]Skipped[/yellow] {branch_name}: branch already exists")
    if report.dry_run:
        display.print_dry_run_notice()
    display.print_pull_requests(report.pull_request_urls)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-b", "--base", metavar="REF",
              help="Branch to create pull requests against (default: the repository's default branch).")
@click.option("-c", "--choose", is_flag=True, help="Interactively choose which issues to create pull requests for.")
@click.option("-a", "--all", "all_", is_flag=True, help="Also create pull requests for commits without an issue.")
@click.option("-s", "--separate", is_flag=True,
              help="Create one pull request per commit, ignoring issue trailers.")
@click.option("-o", "--overlay", is_flag=True,
              help="Combine the chosen issues into a single pull request.")
@click.option("-d", "--dry-run", is_flag=True, envvar="GIT_DISJOINT_DRY_RUN",
              help="Show what would be done without creating branches or pull requests.")
@click.option("--github-token", envvar="GITHUB_TOKEN", metavar="TOKEN", help="GitHub API token.")
@click.option("-C", "directory", type=click.Path(exists=True, file_okay=False),
              help="Run as if started in this directory.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v for commands, -vv for their output).")
def cli(base: Optional[str], choose: bool, all_: bool, separate: bool, overlay: bool, dry_run: bool,
        github_token: Optional[str], directory: Optional[str], verbose: int) -> None:
    """Create one branch and pull request per issue from unpushed commits.

    Commits are grouped by their "Ticket:" or "Closes #N" trailers. Each
    group is cherry-picked onto a new branch from the base, pushed, and
    opened as a draft pull request.
    """
    setup_logging(verbose)
    log_file = LogFile()
    log_file.attach()
    display = ProgressDisplay()

    flags = {
        'base': base,
        'choose': choose,
        'all': all_,
        'separate': separate,
        'overlay': overlay,
        'dry_run': dry_run,
    }
    try:
        repository = GitRepository.open(directory)
        config = build_config(repository, flags)
        github = build_github(config, github_token)
        report = GitDisjoint(config, repository, github, display).run()
    except DisjointError as e:
        log_file.detach()
        click.echo(render_error(e), err=True)
        click.echo(f"\nLog file: {log_file}", err=True)
        contents = log_file.contents()
        if contents:
            click.echo(contents, err=True, nl=False)
        sys.exit(1)

    log_file.delete()
    print_report(report, display)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
