"""Progress display using rich."""

from typing import Optional

from rich.console import Console, RenderableType
from rich.markup import escape
from rich.live import Live
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    TaskProgressColumn,
    TimeElapsedColumn,
)
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from clonewatch.model import FetchProgress
from clonewatch.store import CloningRepositoriesStore


class ProgressDisplay:
    """Single progress bar, fed with values between 0 and 1."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self._progress = None
        self._task = None

    def start_task(self, description: str):
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=self.console,
            refresh_per_second=10,
            transient=True,
        )
        self._progress.start()
        self._task = self._progress.add_task(description, total=1.0)

    def update(self, value: float, description: Optional[str] = None):
        if self._progress and self._task is not None:
            if description:
                self._progress.update(
                    self._task, completed=value, description=description
                )
            else:
                self._progress.update(self._task, completed=value)

    def on_fetch_progress(self, progress: FetchProgress):
        self.update(progress.value, escape(progress.description or progress.title))

    def finish(self):
        """Finish and hide progress bar."""
        if self._progress:
            self._progress.stop()
            self._progress = None
            self._task = None

    def status(self, message: str):
        self.console.print(f"[dim]→[/dim] {escape(message)}")

    def success(self, message: str):
        self.console.print(f"[green]{escape(message)}[/green]")

    def error(self, message: str):
        self.console.print(f"[red]{escape(message)}[/red]")

    def summary(self, data: dict):
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column(style="dim")
        table.add_column()
        for key, value in data.items():
            table.add_row(f"{key}:", str(value))
        self.console.print(table)


class CloneProgressView:
    """
    Live table of the clones tracked by a store.

    Re-renders from the store on every update notification.
    """

    def __init__(self, store: CloningRepositoriesStore, console: Optional[Console] = None):
        self.store = store
        self.console = console or Console()
        self._live = None
        self._subscription = None

    def render(self) -> RenderableType:
        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column(style="bold blue", no_wrap=True)
        table.add_column(width=30)
        table.add_column(style="dim", overflow="ellipsis", no_wrap=True)

        for repository in self.store.repositories:
            state = self.store.get_repository_state(repository)
            if state is None:
                continue
            # total=None renders a pulsing, indeterminate bar
            if state.progress_value is None:
                bar = ProgressBar(total=None, width=30)
            else:
                bar = ProgressBar(total=1.0, completed=state.progress_value, width=30)
            table.add_row(repository.name, bar, Text(state.output))

        return table

    def refresh(self):
        if self._live is not None:
            self._live.update(self.render())

    def __enter__(self):
        self._live = Live(
            self.render(),
            console=self.console,
            refresh_per_second=10,
            transient=True,
        )
        self._live.start()
        self._subscription = self.store.on_did_update(self.refresh)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._subscription is not None:
            self._subscription.dispose()
            self._subscription = None
        if self._live is not None:
            self._live.stop()
            self._live = None
