"""Typed records produced from PBS command output."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pbsmon.pbs.coerce import parse_duration
from pbsmon.pbs.results import Parsed

NOT_AVAILABLE = "N/A"


class JobStatus(Enum):
    """Lifecycle status of a job."""

    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"


class NodeStatus(Enum):
    """Allocation status of a compute node."""

    FREE = "free"
    BUSY = "busy"
    DOWN = "down"
    OFFLINE = "offline"


@dataclass(frozen=True)
class Job:
    """A job from the detailed job listing."""

    job_id: str
    name: str = NOT_AVAILABLE
    owner: str = NOT_AVAILABLE
    queue: str = NOT_AVAILABLE
    status: JobStatus = JobStatus.QUEUED
    nodes: int = 0
    ncpus: int = 0
    mpiprocs: int = 0
    walltime: str = NOT_AVAILABLE
    start_time: str | None = None
    submit_time: str | None = None
    walltime_used: str | None = None

    @property
    def progress(self) -> float | None:
        """Percentage of the requested walltime already used, capped at 100."""
        if self.walltime_used is None:
            return None
        limit = parse_duration(self.walltime)
        used = parse_duration(self.walltime_used)
        if not isinstance(limit, Parsed) or not isinstance(used, Parsed) or limit.value <= 0:
            return None
        return min(100.0, used.value / limit.value * 100.0)


@dataclass(frozen=True)
class Node:
    """A compute node from the node listing."""

    name: str
    status: NodeStatus
    total_cpus: int = 0
    used_cpus: int = 0
    total_memory_gb: float = 0.0
    used_memory_gb: float = 0.0
    jobs: tuple[str, ...] = ()

    @property
    def cpu_usage_pct(self) -> float:
        """Calculate CPU usage percentage."""
        if self.total_cpus == 0:
            return 0.0
        return (self.used_cpus / self.total_cpus) * 100.0

    @property
    def memory_usage_pct(self) -> float:
        """Calculate memory usage percentage."""
        if self.total_memory_gb == 0:
            return 0.0
        return (self.used_memory_gb / self.total_memory_gb) * 100.0


@dataclass(frozen=True)
class StorageUsageRecord:
    """Disk usage of one of the user's volumes, in bytes."""

    mount_point: str
    path: str
    total: int
    used: int
    available: int

    @property
    def usage_pct(self) -> float:
        """Calculate used percentage of total capacity."""
        if self.total <= 0:
            return 0.0
        return (self.used / self.total) * 100.0


@dataclass(frozen=True)
class ClusterSnapshot:
    """Jobs, nodes and storage collected in one refresh cycle."""

    jobs: tuple[Job, ...] = ()
    nodes: tuple[Node, ...] = ()
    storage: tuple[StorageUsageRecord, ...] = ()
    collected_at: datetime = field(default_factory=datetime.now)

    def jobs_by_status(self) -> dict[JobStatus, int]:
        """Count jobs per status, including statuses with no jobs."""
        counts = Counter(job.status for job in self.jobs)
        return {status: counts.get(status, 0) for status in JobStatus}

    def node_status_counts(self) -> dict[NodeStatus, int]:
        """Count nodes per status, including statuses with no nodes."""
        counts = Counter(node.status for node in self.nodes)
        return {status: counts.get(status, 0) for status in NodeStatus}

    def cpu_totals(self) -> tuple[int, int]:
        """Return (used, total) CPUs summed over all nodes."""
        used = sum(node.used_cpus for node in self.nodes)
        total = sum(node.total_cpus for node in self.nodes)
        return used, total

    @property
    def cpu_usage_pct(self) -> float:
        """Cluster-wide CPU usage percentage."""
        used, total = self.cpu_totals()
        if total <= 0:
            return 0.0
        return (used / total) * 100.0
