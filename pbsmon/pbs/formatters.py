"""Formatting helpers for displaying PBS records."""

from pbsmon.pbs.models import JobStatus, NodeStatus

BYTE_UNITS: tuple[str, ...] = ("B", "KB", "MB", "GB", "TB")
BAR_WIDTH = 20

JOB_STATUS_STYLES: dict[JobStatus, str] = {
    JobStatus.RUNNING: "bold green",
    JobStatus.QUEUED: "bold yellow",
    JobStatus.COMPLETED: "cyan",
    JobStatus.ERROR: "bold red",
}

NODE_STATUS_STYLES: dict[NodeStatus, str] = {
    NodeStatus.FREE: "green",
    NodeStatus.BUSY: "yellow",
    NodeStatus.DOWN: "bold red",
    NodeStatus.OFFLINE: "dim",
}


def format_bytes(size: float) -> str:
    """Format a byte count with a binary unit, e.g. "1.5 GB"."""
    unit_index = 0
    while size >= 1024 and unit_index < len(BYTE_UNITS) - 1:
        size /= 1024
        unit_index += 1
    return f"{size:.1f} {BYTE_UNITS[unit_index]}"


def format_gb(used: float, total: float) -> str:
    """Format a used/total gigabyte pair."""
    return f"{used:.1f}/{total:.1f} GB"


def format_pct(pct: float) -> str:
    """Format a usage percentage with color coding.

    Args:
        pct: Percentage value.

    Returns:
        Rich-formatted percentage string.
    """
    if pct >= 90:
        return f"[red]{pct:.1f}%[/red]"
    if pct >= 70:
        return f"[yellow]{pct:.1f}%[/yellow]"
    return f"[green]{pct:.1f}%[/green]"


def format_bar(pct: float, width: int = BAR_WIDTH) -> str:
    """Render a usage bar, clamped to the bar width."""
    filled = max(0, min(width, round(pct / 100 * width)))
    return "█" * filled + "░" * (width - filled)


def format_job_status(status: JobStatus) -> str:
    """Format a job status with Rich markup."""
    style = JOB_STATUS_STYLES[status]
    return f"[{style}]{status.value}[/{style}]"


def format_node_status(status: NodeStatus) -> str:
    """Format a node status with Rich markup."""
    style = NODE_STATUS_STYLES[status]
    return f"[{style}]{status.value}[/{style}]"
