"""Split unpushed commits into one branch and pull request per issue."""

import concurrent.futures
import logging
import time
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

import click
import git
from rich.progress import TaskID

from ..branch import plan_branches
from ..config.models import DisjointConfig
from ..editor import PullRequestMetadata, interactive_get_pr_metadata, metadata_from_commit
from ..errors import ExecuteError, PullRequestError, RepositoryStateError
from ..git import GitRepository
from ..github import GitHubClient
from ..grouping import Chooser, apply_overlay, classify_commits, select_issue_groups
from ..pretty import TICK_INTERVAL, ProgressDisplay, spin_until_done
from ..typing import BranchName, Commit, DisjointBranch

# Get module logger
logger = logging.getLogger(__name__)

# How long a dry run pretends each cherry-pick takes (seconds)
DRY_RUN_DELAY = 0.75

MetadataEditor = Callable[..., PullRequestMetadata]


@dataclass
class CommitWork:
    """One commit to cherry-pick, with the spinner that tracks it."""
    commit: Commit
    task_id: TaskID


@dataclass
class WorkOrder:
    """Everything needed to materialize one planned branch."""
    branch: DisjointBranch
    task_id: TaskID
    commit_work: List[CommitWork]

    @property
    def branch_name(self) -> BranchName:
        return self.branch.branch_name


@dataclass
class BaseRef:
    """The branch pull requests target and the commit new branches start from."""
    branch: str
    commit: git.Commit


@dataclass
class ExecutionReport:
    """Outcome of one run."""
    dry_run: bool = False
    branches: List[BranchName] = field(default_factory=list)
    skipped: List[BranchName] = field(default_factory=list)
    pull_request_urls: List[str] = field(default_factory=list)


class GitDisjoint:
    """Runs the pipeline from unpushed commits to pull requests."""

    def __init__(self, config: DisjointConfig, repository: GitRepository, github: GitHubClient,
                 display: Optional[ProgressDisplay] = None):
        self.config = config
        self.repository = repository
        self.github = github
        self.display = display or ProgressDisplay()
        self.dry_run = config.tool.dry_run
        self.concurrency: int = config.tool.concurrency
        self.dry_run_delay = DRY_RUN_DELAY
        self.tick_interval = TICK_INTERVAL
        self.edit_metadata: MetadataEditor = interactive_get_pr_metadata

    def run(self, chooser: Optional[Chooser] = None) -> ExecutionReport:
        """Classify, select, plan and execute.

        Nothing is changed in the repository until every commit has been
        classified and every branch name planned.
        """
        tool = self.config.tool
        self.repository.check_clean_state()
        base = self.resolve_base()
        logger.info(f"Using base branch {base.branch} at {base.commit.hexsha[:8]}")

        commits = self.repository.commits_since_base(base.commit)
        group_map = classify_commits(commits, consider_all=tool.all, group_individually=tool.separate)
        group_map = select_issue_groups(group_map, tool.choose, tool.overlay, chooser)
        group_map = apply_overlay(group_map, tool.overlay)
        branches = plan_branches(group_map)

        if not branches:
            logger.warning("Nothing to do: no commits with an issue trailer since the base branch "
                           "(use --all to include the rest)")
            return ExecutionReport(dry_run=self.dry_run)

        for branch in branches:
            logger.info(f"Plan: {branch.branch_name} <- {len(branch.commits)} commit(s) for {branch.issue_group}")
        return self.execute(branches, base)

    def default_branch(self) -> str:
        """Name of the branch pull requests target.

        Checked in order: --base, the github_branch setting, the GitHub API,
        then the remote's HEAD as last fetched.
        """
        if self.config.tool.base:
            return self.config.tool.base
        if self.config.repo.github_branch:
            return self.config.repo.github_branch

        remote = self.config.repo.github_remote
        if self.github.available:
            try:
                return self.github.default_branch()
            except PullRequestError as e:
                local = self.repository.remote_head_branch(remote)
                if local is None:
                    raise
                logger.warning(f"{e}; falling back to {remote}/HEAD ({local})")
                return local

        local = self.repository.remote_head_branch(remote)
        if local is None:
            raise RepositoryStateError(
                f"unable to determine the default branch of {remote} -- pass --base or provide a GitHub token")
        return local

    def resolve_base(self) -> BaseRef:
        """Find the commit new branches are created from."""
        remote = self.config.repo.github_remote
        branch = self.default_branch()
        prefix = f"{remote}/"
        if branch.startswith(prefix):
            branch = branch[len(prefix):]

        # Prefer the remote-tracking branch, the local one may be behind or ahead
        try:
            commit = self.repository.resolve(f"{remote}/{branch}")
        except RepositoryStateError:
            commit = self.repository.resolve(branch)
        return BaseRef(branch=branch, commit=commit)

    def work_orders(self, branches: Sequence[DisjointBranch]) -> List[WorkOrder]:
        """Register every branch and commit with the progress display."""
        orders: List[WorkOrder] = []
        for branch in branches:
            task_id = self.display.add_branch(branch.branch_name, len(branch.commits))
            commit_work = [CommitWork(commit, self.display.add_commit(commit)) for commit in branch.commits]
            orders.append(WorkOrder(branch, task_id, commit_work))
        return orders

    def execute(self, branches: Sequence[DisjointBranch], base: BaseRef) -> ExecutionReport:
        """Materialize planned branches one after another.

        Pull requests are submitted in the background as soon as their branch
        is pushed; all of them are waited for before returning, even when a
        later branch fails. Nothing already created is rolled back.

        Raises:
            ExecuteError: If a git command fails for a branch
            EditorError: If pull request metadata could not be written
            PullRequestError: If a pull request could not be created or opened
        """
        report = ExecutionReport(dry_run=self.dry_run)
        original_ref = self.repository.current_ref()
        submissions: List[Tuple[BranchName, Future[str]]] = []
        errors: List[PullRequestError] = []

        executor = concurrent.futures.ThreadPoolExecutor(max_workers=self.concurrency,
                                                         thread_name_prefix="disjoint-pr")
        try:
            with self.display:
                for order in self.work_orders(branches):
                    if self.repository.branch_exists(order.branch_name):
                        logger.warning(f"Skipping {order.branch_name}: branch already exists")
                        self.display.skip_branch(order.task_id, "branch already exists")
                        report.skipped.append(order.branch_name)
                        continue

                    submission = self.execute_work_order(order, base, original_ref, executor)
                    report.branches.append(order.branch_name)
                    if submission is not None:
                        submissions.append((order.branch_name, submission))

                # Keep the display live until every pull request has settled
                concurrent.futures.wait([future for _, future in submissions])
        finally:
            # Drain every submitted pull request, even when an order failed
            report.pull_request_urls, errors = self._drain(executor, submissions)

        if errors:
            raise errors[0]
        return report

    def _drain(self, executor: concurrent.futures.ThreadPoolExecutor,
               submissions: List[Tuple[BranchName, Future[str]]]) -> Tuple[List[str], List[PullRequestError]]:
        concurrent.futures.wait([future for _, future in submissions])
        executor.shutdown(wait=True)

        urls: List[str] = []
        errors: List[PullRequestError] = []
        for branch_name, future in submissions:
            try:
                urls.append(future.result())
            except PullRequestError as e:
                logger.error(f"Pull request for {branch_name} failed: {e}")
                errors.append(e)
        return urls, errors

    def execute_work_order(self, order: WorkOrder, base: BaseRef, original_ref: str,
                           executor: concurrent.futures.Executor) -> Optional[Future[str]]:
        """Create, fill and push one branch, then submit its pull request.

        Returns the pending pull request, or None for a dry run.
        """
        branch_name = order.branch_name
        moved_head = False
        try:
            if not self.dry_run:
                moved_head = True
                self.repository.create_branch(branch_name, base.commit)

            for work in order.commit_work:
                self.cherry_pick(order, work)

            if self.dry_run:
                self.display.finish_branch(order.task_id, "[dim]dry run[/dim]")
                return None

            self.display.set_status(order.task_id, "pushing")
            self.repository.push(self.config.repo.effective_push_remote, branch_name)
            metadata = self.pull_request_metadata(order)
        finally:
            if moved_head:
                self.repository.checkout(original_ref)

        self.display.set_status(order.task_id, "opening pull request")
        return executor.submit(self.submit_pull_request, order, metadata, base.branch)

    def cherry_pick(self, order: WorkOrder, work: CommitWork) -> None:
        """Apply one commit while its spinner runs."""
        def apply() -> None:
            if self.dry_run:
                time.sleep(self.dry_run_delay)
            else:
                self.repository.cherry_pick(work.commit)

        try:
            spin_until_done(self.display, work.task_id, apply, self.tick_interval)
        except ExecuteError as e:
            self.display.fail_commit(work.task_id)
            self.repository.abort_cherry_pick()
            raise ExecuteError(f"unable to cherry-pick {work.commit.short_hash} onto {order.branch_name}",
                               e.command) from e
        self.display.finish_commit(order.task_id, work.task_id)

    def pull_request_metadata(self, order: WorkOrder) -> PullRequestMetadata:
        """One commit speaks for itself; several are described in the editor."""
        commits = order.branch.commits
        if len(commits) == 1:
            return metadata_from_commit(commits[0])
        with self.display.suspended():
            return self.edit_metadata(self.repository.root, commits)

    def submit_pull_request(self, order: WorkOrder, metadata: PullRequestMetadata, base_branch: str) -> str:
        try:
            url = self.github.create_pull_request(order.branch_name, metadata, base_branch)
        except PullRequestError:
            self.display.set_status(order.task_id, "[red]pull request failed[/red]")
            raise
        except Exception as e:
            self.display.set_status(order.task_id, "[red]pull request failed[/red]")
            target = self.github.pulls_url
            raise PullRequestError(f"unable to create pull request for {order.branch_name}: {e}", target) from e
        self.display.finish_branch(order.task_id)
        if self.config.user.open_browser:
            self.open_in_browser(url)
        return url

    def open_in_browser(self, url: str) -> None:
        logger.info(f"> open {url}")
        try:
            status = click.launch(url)
        except OSError as e:
            raise PullRequestError(f"unable to open {url} in a browser", url) from e
        if status != 0:
            raise PullRequestError(f"unable to open {url} in a browser", url)
