"""console progress for registry round trips and downloads."""

import sys
from contextlib import contextmanager
from typing import Optional
from rich.console import Console
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    DownloadColumn,
    TransferSpeedColumn,
    TimeRemainingColumn,
    TaskID,
)


class ProgressManager:
    """shows spinners and download bars, or stays quiet when not on a tty."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self._enabled = self._should_show_progress()

    def _should_show_progress(self) -> bool:
        """
        check if we should show progress bars.

        returns false in non-interactive environments (ci/cd, piped output).
        """
        return sys.stdout.isatty() and not sys.stdout.closed

    def print(self, *args, **kwargs):
        """print through managed console to avoid interference with progress bars."""
        self.console.print(*args, **kwargs)

    @contextmanager
    def spinner(self, description: str, transient: bool = True):
        """
        show an indeterminate spinner while waiting on the registry.

        yields:
            task id for the spinner, or None in non-interactive mode
        """
        if not self._enabled:
            yield None
            return

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=self.console,
            transient=transient,
        ) as progress:
            task_id = progress.add_task(description, total=None)
            yield task_id

    @contextmanager
    def download_progress(self, description: str, total: Optional[int] = None):
        """
        show a download bar with transfer speed.

        args:
            description: label for the bar
            total: expected size in bytes, if the registry sent one

        yields:
            tuple of (progress, task_id); call progress.advance(task_id, n)
        """
        if not self._enabled:
            yield _DummyProgress(), TaskID(0)
            return

        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=self.console,
            transient=True,
        ) as progress:
            task_id = progress.add_task(description, total=total)
            yield progress, task_id


class _DummyProgress:
    """dummy progress object for non-interactive mode."""

    def update(self, task_id: TaskID, **kwargs):
        pass

    def advance(self, task_id: TaskID, advance: float = 1):
        pass
