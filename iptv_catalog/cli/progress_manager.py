"""
Renders the refresh status stream as a Rich progress display, one bar per stage.
"""

import asyncio

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from iptv_catalog.models.progress import RefreshState, RefreshStatus

_STAGE_LABELS = {
    RefreshState.VALIDATING: "🔐 Account",
    RefreshState.DOWNLOADING: "📥 Download",
    RefreshState.PARSING: "🧩 Parse",
    RefreshState.PERSISTING: "💾 Save",
}


class ProgressManager:
    """
    A refresh observer that keeps one progress task per pipeline stage.

    Stages without a percent show a spinner until the next stage starts, at
    which point the previous task is marked complete.
    """

    def __init__(self, console: Console, quiet: bool = False):
        self.console = console
        self.quiet = quiet
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.fields[stage]:<12}"),
            BarColumn(bar_width=30),
            "[progress.percentage]{task.percentage:>3.0f}%",
            "•",
            TextColumn("{task.description}"),
            TimeElapsedColumn(),
            console=console,
            transient=False,
        )
        self._tasks: dict[RefreshState, TaskID] = {}
        self._current: RefreshState | None = None
        self.statuses: list[RefreshStatus] = []

    def on_progress(self, status: RefreshStatus) -> None:
        self.statuses.append(status)
        if self.quiet:
            return

        if status.state in _STAGE_LABELS:
            self._update_stage(status)
        elif status.state.is_terminal:
            self._close_current(status)

    def _update_stage(self, status: RefreshStatus) -> None:
        if status.state is not self._current:
            self._finish_current()
            self._tasks[status.state] = self.progress.add_task(
                status.message, total=100, stage=_STAGE_LABELS[status.state]
            )
            self._current = status.state

        task_id = self._tasks[status.state]
        if status.percent is not None:
            self.progress.update(
                task_id, completed=status.percent, description=status.message
            )
        else:
            self.progress.update(task_id, description=status.message)

    def _close_current(self, status: RefreshStatus) -> None:
        if status.success:
            self._finish_current()
        elif self._current is not None:
            task_id = self._tasks[self._current]
            self.progress.update(task_id, description=f"[red]{status.message}[/red]")
            self.progress.stop_task(task_id)
            self._current = None

    def _finish_current(self) -> None:
        if self._current is None:
            return
        self.progress.update(self._tasks[self._current], completed=100)
        self._current = None

    @property
    def final_status(self) -> RefreshStatus | None:
        return self.statuses[-1] if self.statuses else None

    async def __aenter__(self):
        if not self.quiet:
            self.progress.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if not self.quiet:
            await asyncio.sleep(0.1)
            self.progress.stop()
