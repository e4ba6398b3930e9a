"""Tests for PBS record types."""

import dataclasses

import pytest

from pbsmon.pbs.models import ClusterSnapshot, Job, JobStatus, Node, NodeStatus, StorageUsageRecord


class TestJob:
    """Tests for the Job dataclass."""

    def test_is_immutable(self) -> None:
        job = Job(job_id="1.server")
        with pytest.raises(dataclasses.FrozenInstanceError):
            job.name = "changed"  # type: ignore[misc]

    def test_progress(self) -> None:
        job = Job(job_id="1.server", status=JobStatus.RUNNING, walltime="24:00:00", walltime_used="06:00:00")
        assert job.progress == pytest.approx(25.0)

    def test_progress_capped(self) -> None:
        job = Job(job_id="1.server", walltime="01:00:00", walltime_used="01:30:00")
        assert job.progress == 100.0

    def test_progress_unknown_without_usage(self) -> None:
        assert Job(job_id="1.server", walltime="01:00:00").progress is None

    def test_progress_unknown_with_placeholder_walltime(self) -> None:
        assert Job(job_id="1.server", walltime_used="00:10:00").progress is None

    def test_progress_unknown_with_zero_walltime(self) -> None:
        assert Job(job_id="1.server", walltime="00:00:00", walltime_used="00:10:00").progress is None


class TestNode:
    """Tests for the Node dataclass."""

    def test_usage_percentages(self) -> None:
        node = Node(
            name="n1",
            status=NodeStatus.BUSY,
            total_cpus=16,
            used_cpus=8,
            total_memory_gb=64.0,
            used_memory_gb=16.0,
        )
        assert node.cpu_usage_pct == 50.0
        assert node.memory_usage_pct == 25.0

    def test_zero_totals(self) -> None:
        node = Node(name="n1", status=NodeStatus.DOWN)
        assert node.cpu_usage_pct == 0.0
        assert node.memory_usage_pct == 0.0


class TestStorageUsageRecord:
    """Tests for the StorageUsageRecord dataclass."""

    def test_usage_pct(self) -> None:
        record = StorageUsageRecord(mount_point="Home Directory", path="/home/a", total=5000, used=1000, available=4000)
        assert record.usage_pct == 20.0


class TestClusterSnapshot:
    """Tests for cluster-wide CPU figures."""

    def test_cpu_totals(self) -> None:
        snapshot = ClusterSnapshot(
            nodes=(
                Node(name="a", status=NodeStatus.BUSY, total_cpus=64, used_cpus=64),
                Node(name="b", status=NodeStatus.FREE, total_cpus=64),
            )
        )
        assert snapshot.cpu_totals() == (64, 128)
        assert snapshot.cpu_usage_pct == 50.0

    def test_empty_snapshot(self) -> None:
        assert ClusterSnapshot().cpu_totals() == (0, 0)
        assert ClusterSnapshot().cpu_usage_pct == 0.0
