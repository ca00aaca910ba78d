"""Rich-based sync progress display."""

from __future__ import annotations

from types import TracebackType
from typing import ClassVar

from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.progress import TaskID as RichTaskID

from mapsync.engine.progress import SyncPhase, SyncProgress


class RichSyncProgress(SyncProgress):
    """One live bar per sync phase, drawn on stderr.

    Phases that start with nothing to do, such as ``SyncPhase.MAPS`` when every
    map is current, are labelled as up to date. Interrupted phases keep a red
    marker with the error text::

        with RichSyncProgress() as progress:
            report = await MapSync(config=config, progress=progress).check_and_sync()
    """

    _PHASE_COLORS: ClassVar[dict[SyncPhase, str]] = {
        SyncPhase.CATALOG: "cyan",
        SyncPhase.CHECK: "blue",
        SyncPhase.MAPS: "green",
        SyncPhase.STATIC: "magenta",
    }

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)
        self._progress = Progress(
            SpinnerColumn(finished_text="[green]✓[/green]"),
            TextColumn("{task.description}"),
            BarColumn(bar_width=24),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self._console,
        )
        self._task_ids: dict[SyncPhase, RichTaskID] = {}
        self._errors: dict[SyncPhase, str] = {}

    @property
    def failed_phases(self) -> dict[SyncPhase, str]:
        return dict(self._errors)

    def __enter__(self) -> RichSyncProgress:
        self._progress.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self._progress.stop()

    def phase_start(self, phase: SyncPhase, total: int | None = None) -> None:
        description = self._label(phase)
        if total == 0:
            description += " [dim]up to date[/dim]"
        self._task_ids[phase] = self._progress.add_task(description, total=total)

    def item_done(self, phase: SyncPhase) -> None:
        task_id = self._task_ids.get(phase)
        if task_id is not None:
            self._progress.advance(task_id)

    def phase_done(self, phase: SyncPhase) -> None:
        task_id = self._task_ids.get(phase)
        if task_id is None:
            return
        total = self._progress.tasks[task_id].total
        if total is None:
            self._progress.update(task_id, total=1, completed=1)
        else:
            self._progress.update(task_id, completed=total)

    def phase_error(self, phase: SyncPhase, error: BaseException) -> None:
        self._errors[phase] = str(error)
        task_id = self._task_ids.get(phase)
        if task_id is None:
            return
        self._progress.update(task_id, description=f"[red]✗ {phase:>7}[/red] [dim]{escape(str(error))[:60]}[/dim]")

    def _label(self, phase: SyncPhase) -> str:
        color = self._PHASE_COLORS[phase]
        return f"[{color}]{phase:>9}[/{color}]"
