"""
Mirrors an orchestrator's workflow progress onto a Rich progress bar.
"""

from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn

from rookie_cli.core.orchestrator import Orchestrator
from rookie_cli.models.workflow import WorkflowState


class ProgressManager:
    """
    Shows a single progress bar whose position and label follow the
    orchestrator's `progress` and `status` fields. Log lines themselves reach
    the console through logging, not through this class.
    """

    def __init__(self, console: Console, orchestrator: Orchestrator):
        self.console = console
        self.orchestrator = orchestrator

        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}", justify="left"),
            BarColumn(bar_width=30),
            "[progress.percentage]{task.percentage:>3.0f}%",
            console=console,
            transient=True,
        )
        self._task_id: TaskID | None = None
        self._unsubscribe = None

    async def __aenter__(self) -> "ProgressManager":
        self._task_id = self.progress.add_task("Starting...", total=100)
        self._unsubscribe = self.orchestrator.subscribe(self._on_state)
        self.progress.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._unsubscribe:
            self._unsubscribe()
        self.progress.stop()

    def _on_state(self, state: WorkflowState) -> None:
        if self._task_id is None:
            return
        self.progress.update(
            self._task_id,
            completed=state.progress * 100,
            description=escape(state.status),
        )
