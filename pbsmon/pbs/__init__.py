"""PBS interaction modules."""

from pbsmon.pbs.commands import CommandError, fetch_jobs, fetch_nodes, fetch_storage, run_command
from pbsmon.pbs.job_parser import parse_job_listing, parse_jobs
from pbsmon.pbs.models import ClusterSnapshot, Job, JobStatus, Node, NodeStatus, StorageUsageRecord
from pbsmon.pbs.node_parser import parse_node_listing, parse_nodes
from pbsmon.pbs.results import Parsed, ParseError, ParseReport, Unparseable
from pbsmon.pbs.snapshot import SnapshotStore, collect_snapshot
from pbsmon.pbs.storage_parser import parse_storage
from pbsmon.pbs.units import SizeUnit, parse_size, to_bytes, to_gigabytes

__all__ = [
    "ClusterSnapshot",
    "CommandError",
    "Job",
    "JobStatus",
    "Node",
    "NodeStatus",
    "ParseError",
    "ParseReport",
    "Parsed",
    "SizeUnit",
    "SnapshotStore",
    "StorageUsageRecord",
    "Unparseable",
    "collect_snapshot",
    "fetch_jobs",
    "fetch_nodes",
    "fetch_storage",
    "parse_job_listing",
    "parse_jobs",
    "parse_node_listing",
    "parse_nodes",
    "parse_size",
    "parse_storage",
    "run_command",
    "to_bytes",
    "to_gigabytes",
]
