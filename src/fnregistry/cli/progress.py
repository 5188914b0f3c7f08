"""Progress display for the registry pipeline."""

from __future__ import annotations

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from ..models import Summary


class RegistryProgress:
    """One progress bar per pipeline phase, fed by dispatcher callbacks."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(stderr=True)
        self._progress: Progress | None = None
        self._task_id: TaskID | None = None

    def start(self) -> None:
        """Start the progress display."""
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold]{task.description}"),
            BarColumn(bar_width=40, complete_style="cyan", finished_style="green"),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )
        self._progress.start()

    def start_phase(self, description: str, total: int) -> None:
        if self._progress is None:
            return
        if self._task_id is not None:
            self._progress.update(self._task_id, visible=False)
        self._task_id = self._progress.add_task(description, total=max(total, 1))

    def advance(self, completed: int, total: int) -> None:
        """Dispatcher callback; may be called from worker threads."""
        if self._progress is None or self._task_id is None:
            return
        self._progress.update(self._task_id, completed=completed, total=max(total, 1))

    def finish(self) -> None:
        """Stop the progress display."""
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
            self._task_id = None

    def __enter__(self) -> "RegistryProgress":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.finish()


def create_summary_table(summary: Summary, relations_built: bool = True) -> Table:
    """Create a compact table of the registry summary."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="dim")
    table.add_column(style="bold")

    table.add_row("Functions", str(summary.total_functions))
    table.add_row("Files", str(summary.total_files))
    table.add_row("Public", str(summary.public_functions))
    table.add_row("Private", str(summary.private_functions))
    table.add_row("Tests", str(summary.test_functions))
    dead = summary.dead_functions
    if relations_built:
        table.add_row("Dead", f"[{'yellow' if dead else 'green'}]{dead}[/]")
    else:
        table.add_row("Dead", "[dim]not computed (--add-relations)[/]")

    return table
