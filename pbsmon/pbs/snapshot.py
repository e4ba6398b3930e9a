"""Assemble jobs, nodes and storage into one cluster snapshot.

The three probes run concurrently. A probe that fails, or a fetcher that
raises unexpectedly, leaves its resource class empty without affecting the
other two.
"""

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from threading import Lock
from typing import TypeVar

from pbsmon.logger import get_logger
from pbsmon.pbs.commands import CommandRunner, fetch_jobs, fetch_nodes, fetch_storage, run_command
from pbsmon.pbs.models import ClusterSnapshot
from pbsmon.settings import Settings

logger = get_logger(__name__)

T = TypeVar("T")


def _guarded(name: str, fetch: Callable[[], Sequence[T]]) -> Callable[[], tuple[T, ...]]:
    def wrapper() -> tuple[T, ...]:
        try:
            return tuple(fetch())
        except Exception:
            logger.exception(f"Unexpected error collecting {name}")
            return ()

    return wrapper


def collect_snapshot(
    settings: Settings | None = None,
    runner: CommandRunner = run_command,
    username: str | None = None,
) -> ClusterSnapshot:
    """Run the job, node and storage probes concurrently.

    Args:
        settings: Settings passed to each fetcher.
        runner: Command runner shared by the fetchers.
        username: User whose storage is reported; defaults to the current user.

    Returns:
        A snapshot with whatever each probe could provide.
    """
    settings = settings or Settings()
    with ThreadPoolExecutor(max_workers=3, thread_name_prefix="pbsmon-probe") as executor:
        jobs_future = executor.submit(_guarded("jobs", lambda: fetch_jobs(settings, runner)))
        nodes_future = executor.submit(_guarded("nodes", lambda: fetch_nodes(settings, runner)))
        storage_future = executor.submit(_guarded("storage", lambda: fetch_storage(settings, runner, username)))
        snapshot = ClusterSnapshot(
            jobs=jobs_future.result(),
            nodes=nodes_future.result(),
            storage=storage_future.result(),
        )

    logger.debug(
        f"Snapshot collected: {len(snapshot.jobs)} jobs, {len(snapshot.nodes)} nodes, "
        f"{len(snapshot.storage)} storage volumes"
    )
    return snapshot


class SnapshotStore:
    """Thread-safe holder for the most recent snapshot."""

    def __init__(self, settings: Settings | None = None, runner: CommandRunner = run_command) -> None:
        self.settings = settings or Settings()
        self._runner = runner
        self._data_lock = Lock()
        self._snapshot = ClusterSnapshot()
        self._refresh_count = 0

    def refresh(self) -> ClusterSnapshot:
        """Collect a new snapshot and make it current."""
        logger.debug("Refreshing cluster snapshot")
        snapshot = collect_snapshot(self.settings, self._runner)
        with self._data_lock:
            self._snapshot = snapshot
            self._refresh_count += 1
        return snapshot

    @property
    def snapshot(self) -> ClusterSnapshot:
        """Get the most recent snapshot."""
        with self._data_lock:
            return self._snapshot

    @property
    def refresh_count(self) -> int:
        """Get the number of completed refreshes."""
        with self._data_lock:
            return self._refresh_count
