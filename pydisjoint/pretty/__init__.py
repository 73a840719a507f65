"""Live progress and summary output for the CLI."""

import concurrent.futures
import contextlib
import queue
from typing import Callable, Iterator, List, Optional, TypeVar

from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TaskID, TextColumn

from ..typing import BranchName, Commit

T = TypeVar('T')

# Spinner repaint interval while a commit is being applied (seconds)
TICK_INTERVAL = 0.015


class ProgressDisplay:
    """One line per branch, with a spinner line per commit below it."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)
        self.progress = Progress(
            SpinnerColumn(finished_text="[green]✓[/green]"),
            TextColumn("{task.description}"),
            TextColumn("{task.fields[status]}"),
            console=self.console,
            auto_refresh=False,
        )

    def __enter__(self) -> 'ProgressDisplay':
        self.progress.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.progress.stop()

    @contextlib.contextmanager
    def suspended(self) -> Iterator[None]:
        """Hand the terminal to something else, e.g. an editor."""
        self.progress.stop()
        try:
            yield
        finally:
            self.progress.start()

    def add_branch(self, branch_name: BranchName, commit_count: int) -> TaskID:
        return self.progress.add_task(f"[bold]{branch_name}[/bold]", total=commit_count, status="")

    def add_commit(self, commit: Commit) -> TaskID:
        return self.progress.add_task(escape(f"  {commit}"), total=1, status="")

    def tick(self, task_id: TaskID) -> None:
        """Repaint so the spinner of ``task_id`` advances."""
        self.progress.refresh()

    def finish_commit(self, branch_task: TaskID, commit_task: TaskID) -> None:
        self.progress.update(commit_task, completed=1)
        self.progress.advance(branch_task)
        self.progress.refresh()

    def fail_commit(self, commit_task: TaskID) -> None:
        self.progress.update(commit_task, status="[red]failed[/red]")
        self.progress.stop_task(commit_task)
        self.progress.refresh()

    def set_status(self, branch_task: TaskID, status: str) -> None:
        self.progress.update(branch_task, status=status)
        self.progress.refresh()

    def skip_branch(self, branch_task: TaskID, reason: str) -> None:
        task = self.progress.tasks[self._index(branch_task)]
        self.progress.update(branch_task, completed=task.total, status=f"[yellow]skipped: {reason}[/yellow]")
        self.progress.refresh()

    def finish_branch(self, branch_task: TaskID, status: str = "[green]done[/green]") -> None:
        self.set_status(branch_task, status)

    def _index(self, task_id: TaskID) -> int:
        for i, task in enumerate(self.progress.tasks):
            if task.id == task_id:
                return i
        raise KeyError(task_id)

    def print_dry_run_notice(self) -> None:
        self.console.print("[bold yellow]Dry run:[/bold yellow] no branches, pushes or pull requests were created")

    def print_pull_requests(self, urls: List[str]) -> None:
        if not urls:
            return
        self.console.print()
        self.console.print(f"Created {len(urls)} pull request{'s' if len(urls) != 1 else ''}:")
        for url in urls:
            self.console.print(f"  {url}", markup=False)


def spin_until_done(display: ProgressDisplay, task_id: TaskID, work: Callable[[], T],
                    interval: float = TICK_INTERVAL) -> T:
    """Run ``work`` on a worker thread while a ticker thread keeps the spinner moving.

    The worker signals completion on a one-slot queue whether it succeeds or
    fails; the ticker is the only reader and stops as soon as the signal
    arrives. Exceptions raised by ``work`` are re-raised here.
    """
    done: "queue.Queue[None]" = queue.Queue(maxsize=1)

    def worker() -> T:
        try:
            return work()
        finally:
            done.put(None)

    def ticker() -> None:
        while True:
            try:
                done.get(timeout=interval)
                return
            except queue.Empty:
                display.tick(task_id)

    with concurrent.futures.ThreadPoolExecutor(max_workers=2, thread_name_prefix="disjoint-spin") as pool:
        spinner = pool.submit(ticker)
        result = pool.submit(worker)
        concurrent.futures.wait([spinner, result])

    spinner.result()
    return result.result()
