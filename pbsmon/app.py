"""Main Textual TUI application for pbsmon."""

from typing import ClassVar

from textual.app import App, ComposeResult
from textual.containers import Container, VerticalScroll
from textual.timer import Timer
from textual.widgets import DataTable, Footer, Header, Static
from textual.worker import Worker, WorkerState

from pbsmon.logger import add_tui_sink, get_logger, remove_tui_sink
from pbsmon.pbs.commands import CommandRunner, run_command
from pbsmon.pbs.formatters import format_job_status
from pbsmon.pbs.models import ClusterSnapshot, Job
from pbsmon.pbs.snapshot import SnapshotStore
from pbsmon.settings import Settings, load_settings
from pbsmon.widgets.cluster_status import ClusterStatus
from pbsmon.widgets.log_pane import LogPane
from pbsmon.widgets.user_storage import UserStorage

logger = get_logger(__name__)


class PbsMonitor(App[None]):
    """Textual TUI app for monitoring a PBS cluster."""

    TITLE = "PBS Cluster Monitor"
    ENABLE_COMMAND_PALETTE = False
    CSS: ClassVar[str] = """
    #jobs-panel {
        height: 1fr;
    }
    #log-panel {
        height: auto;
    }
    """
    BINDINGS: ClassVar[tuple[tuple[str, str, str], ...]] = (
        ("q", "quit", "Quit"),
        ("r", "refresh", "Refresh Now"),
    )

    def __init__(self, settings: Settings | None = None, runner: CommandRunner = run_command) -> None:
        """Initialize the PBS monitor app.

        Args:
            settings: Settings to use; loaded from disk when omitted.
            runner: Command runner used for all probes.
        """
        super().__init__()
        self.settings = settings or load_settings()
        self.auto_refresh_timer: Timer | None = None
        self._store = SnapshotStore(self.settings, runner)
        self._refresh_worker: Worker[None] | None = None
        self._initial_load_complete: bool = False
        self._log_sink_id: int | None = None
        logger.info("Initializing PbsMonitor app")

    def compose(self) -> ComposeResult:
        """Create the UI layout.

        Yields:
            The widgets that make up the application UI.
        """
        yield Header(show_clock=True)
        yield ClusterStatus(id="cluster-status")

        with VerticalScroll(id="jobs-panel"):
            yield Static("[bold]📋 Jobs[/bold]", id="jobs-title")
            yield Static("[dim]Loading jobs...[/dim]", id="jobs-summary")
            yield DataTable(id="jobs_table")

        yield UserStorage(id="user-storage")

        with Container(id="log-panel"):
            yield LogPane(id="log_pane")

        yield Footer()

    def on_mount(self) -> None:
        """Initialize tables and start data loading."""
        log_pane = self.query_one("#log_pane", LogPane)
        self._log_sink_id = add_tui_sink(log_pane.sink, level=self.settings.log_level)

        jobs_table = self.query_one("#jobs_table", DataTable)
        jobs_table.cursor_type = "row"
        jobs_table.add_columns(
            "Job ID", "Name", "Owner", "Queue", "Status", "Nodes", "CPUs", "MPI", "Walltime", "Started"
        )

        self.notify("Loading cluster data...", timeout=2)
        self._start_refresh_worker()

    def _start_refresh_worker(self) -> None:
        """Start background worker for data refresh, unless one is running."""
        if self._refresh_worker is not None and self._refresh_worker.state == WorkerState.RUNNING:
            logger.debug("Refresh worker already running, skipping")
            return

        self._refresh_worker = self.run_worker(
            self._refresh_data,
            name="refresh_data",
            exclusive=True,
            thread=True,
        )

    def _refresh_data(self) -> None:
        """Collect a snapshot (runs in a background worker thread)."""
        snapshot = self._store.refresh()
        self.call_from_thread(self._update_ui, snapshot)

    def _update_ui(self, snapshot: ClusterSnapshot) -> None:
        """Update all panels from a snapshot (must run on main thread).

        Args:
            snapshot: The snapshot to display.
        """
        self.query_one(ClusterStatus).update_snapshot(snapshot)
        self.query_one("#jobs-summary", Static).update(self._render_jobs_summary(snapshot))
        self._update_jobs_table(list(snapshot.jobs))
        self.query_one(UserStorage).update_storage(list(snapshot.storage))
        self.sub_title = f"Updated {snapshot.collected_at:%H:%M:%S}"

        if not self._initial_load_complete:
            self._initial_load_complete = True
            self.auto_refresh_timer = self.set_interval(self.settings.refresh_interval, self._start_refresh_worker)
            logger.info(f"Auto-refresh started with interval {self.settings.refresh_interval}s")

    def _update_jobs_table(self, jobs: list[Job]) -> None:
        """Replace the rows of the jobs table.

        Args:
            jobs: Jobs to display.
        """
        jobs_table = self.query_one("#jobs_table", DataTable)
        cursor_row = jobs_table.cursor_row

        jobs_table.clear()
        for job in jobs:
            jobs_table.add_row(
                job.job_id,
                job.name,
                job.owner,
                job.queue,
                format_job_status(job.status),
                str(job.nodes),
                str(job.ncpus),
                str(job.mpiprocs),
                self._format_walltime(job),
                job.start_time or "-",
            )

        if cursor_row is not None and jobs_table.row_count > 0:
            jobs_table.move_cursor(row=min(cursor_row, jobs_table.row_count - 1))

    def _render_jobs_summary(self, snapshot: ClusterSnapshot) -> str:
        """Render job counts per status.

        Args:
            snapshot: Snapshot to summarize.

        Returns:
            Summary string with Rich markup.
        """
        if not snapshot.jobs:
            return "[dim]No jobs found[/dim]"
        counts = snapshot.jobs_by_status()
        parts = [f"{format_job_status(status)}: {count}" for status, count in counts.items() if count]
        return f"{len(snapshot.jobs)} jobs  " + "  ".join(parts)

    def _format_walltime(self, job: Job) -> str:
        """Format the walltime limit, with progress when the job has started.

        Args:
            job: The job to format.

        Returns:
            Walltime string.
        """
        progress = job.progress
        if progress is None:
            return job.walltime
        return f"{job.walltime} ({progress:.0f}%)"

    def action_refresh(self) -> None:
        """Manual refresh action."""
        logger.info("Manual refresh triggered")
        self.notify("Refreshing...")
        self._start_refresh_worker()

    async def action_quit(self) -> None:
        """Quit the application."""
        logger.info("Quitting application")
        if self.auto_refresh_timer:
            self.auto_refresh_timer.stop()
        if self._log_sink_id is not None:
            remove_tui_sink(self._log_sink_id)
            self._log_sink_id = None
        self.exit()


def main() -> None:
    """Run the PBS monitor TUI app."""
    logger.info("Starting pbsmon")
    app = PbsMonitor()
    app.run()
    logger.info("pbsmon exited")
