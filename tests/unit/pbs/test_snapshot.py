"""Tests for concurrent snapshot assembly."""

import threading
from collections.abc import Mapping, Sequence
from unittest.mock import patch

from pbsmon.pbs.commands import CommandError
from pbsmon.pbs.models import ClusterSnapshot, JobStatus, NodeStatus
from pbsmon.pbs.snapshot import SnapshotStore, collect_snapshot
from pbsmon.settings import Settings

SETTINGS = Settings(executables=(("qstat", "/pbs/qstat"), ("pbsnodes", "/pbs/pbsnodes"), ("bash", "/bin/bash")))


class CannedRunner:
    """Runner answering each executable with canned output or an error."""

    def __init__(self, outputs: Mapping[str, str | Exception]) -> None:
        self.outputs = outputs
        self.threads: set[str] = set()
        self._lock = threading.Lock()

    def __call__(
        self,
        executable: str,
        args: Sequence[str],
        env: Mapping[str, str] | None = None,
        timeout: float = 10.0,
    ) -> str:
        with self._lock:
            self.threads.add(threading.current_thread().name)
        result = self.outputs[executable]
        if isinstance(result, Exception):
            raise result
        return result


class TestCollectSnapshot:
    """Tests for collect_snapshot."""

    def test_merges_all_three_classes(
        self, sample_qstat_output: str, sample_pbsnodes_output: str, sample_storage_output: str
    ) -> None:
        runner = CannedRunner(
            {
                "/pbs/qstat": sample_qstat_output,
                "/pbs/pbsnodes": sample_pbsnodes_output,
                "/bin/bash": sample_storage_output,
            }
        )
        snapshot = collect_snapshot(SETTINGS, runner, username="alice")

        assert len(snapshot.jobs) == 2
        assert len(snapshot.nodes) == 3
        assert len(snapshot.storage) == 2
        assert all(name.startswith("pbsmon-probe") for name in runner.threads)

    def test_failed_probe_does_not_affect_others(self, sample_qstat_output: str, sample_storage_output: str) -> None:
        runner = CannedRunner(
            {
                "/pbs/qstat": sample_qstat_output,
                "/pbs/pbsnodes": CommandError("pbsnodes failed: server down"),
                "/bin/bash": sample_storage_output,
            }
        )
        snapshot = collect_snapshot(SETTINGS, runner, username="alice")

        assert snapshot.nodes == ()
        assert len(snapshot.jobs) == 2
        assert len(snapshot.storage) == 2

    def test_all_probes_failing_gives_empty_snapshot(self) -> None:
        error = CommandError("unreachable")
        runner = CannedRunner({"/pbs/qstat": error, "/pbs/pbsnodes": error, "/bin/bash": error})
        snapshot = collect_snapshot(SETTINGS, runner, username="alice")
        assert (snapshot.jobs, snapshot.nodes, snapshot.storage) == ((), (), ())

    def test_unexpected_error_degrades_one_class(self, sample_pbsnodes_output: str) -> None:
        runner = CannedRunner({"/pbs/pbsnodes": sample_pbsnodes_output, "/bin/bash": "1 2 1 1"})
        with patch("pbsmon.pbs.snapshot.fetch_jobs", side_effect=RuntimeError("boom")):
            snapshot = collect_snapshot(SETTINGS, runner, username="alice")
        assert snapshot.jobs == ()
        assert len(snapshot.nodes) == 3


class TestClusterSnapshot:
    """Tests for snapshot summaries."""

    def test_counts(self, sample_qstat_output: str, sample_pbsnodes_output: str) -> None:
        runner = CannedRunner(
            {"/pbs/qstat": sample_qstat_output, "/pbs/pbsnodes": sample_pbsnodes_output, "/bin/bash": ""}
        )
        snapshot = collect_snapshot(SETTINGS, runner, username="alice")

        assert snapshot.jobs_by_status() == {
            JobStatus.QUEUED: 1,
            JobStatus.RUNNING: 1,
            JobStatus.COMPLETED: 0,
            JobStatus.ERROR: 0,
        }
        assert snapshot.node_status_counts()[NodeStatus.BUSY] == 1
        assert snapshot.node_status_counts()[NodeStatus.OFFLINE] == 0

    def test_empty_snapshot(self) -> None:
        snapshot = ClusterSnapshot()
        assert sum(snapshot.jobs_by_status().values()) == 0


class TestSnapshotStore:
    """Tests for SnapshotStore."""

    def test_starts_empty(self) -> None:
        store = SnapshotStore(SETTINGS, CannedRunner({}))
        assert store.snapshot == ClusterSnapshot(collected_at=store.snapshot.collected_at)
        assert store.refresh_count == 0

    def test_refresh_replaces_snapshot(self, sample_qstat_output: str) -> None:
        runner = CannedRunner(
            {"/pbs/qstat": sample_qstat_output, "/pbs/pbsnodes": "", "/bin/bash": "1 2 1 1"}
        )
        store = SnapshotStore(SETTINGS, runner)
        with patch("pbsmon.pbs.commands.get_current_username", return_value="alice"):
            snapshot = store.refresh()

        assert store.snapshot is snapshot
        assert store.refresh_count == 1
        assert len(snapshot.jobs) == 2
        assert snapshot.nodes == ()
        assert [record.path for record in snapshot.storage] == ["/home/alice"]

    def test_repeated_refresh_keeps_no_residual_state(self, sample_qstat_output: str) -> None:
        outputs: dict[str, str | Exception] = {
            "/pbs/qstat": sample_qstat_output,
            "/pbs/pbsnodes": "",
            "/bin/bash": "",
        }
        store = SnapshotStore(SETTINGS, CannedRunner(outputs))
        with patch("pbsmon.pbs.commands.get_current_username", return_value="alice"):
            store.refresh()
            outputs["/pbs/qstat"] = CommandError("qstat failed")
            second = store.refresh()

        assert second.jobs == ()
        assert store.refresh_count == 2
