"""Cluster status widget: node summary and per-node table."""

from typing import ClassVar

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import DataTable, Static

from pbsmon.pbs.formatters import format_bar, format_gb, format_node_status, format_pct
from pbsmon.pbs.models import ClusterSnapshot, Node


class ClusterStatus(Vertical):
    """Widget displaying node states and resource usage."""

    DEFAULT_CSS: ClassVar[str] = """
    ClusterStatus {
        height: auto;
        max-height: 50%;
        width: 100%;
    }
    ClusterStatus #cluster-summary {
        padding: 0 1;
    }
    ClusterStatus DataTable {
        height: auto;
    }
    """

    def __init__(
        self,
        *,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
        disabled: bool = False,
    ) -> None:
        """Initialize the ClusterStatus widget.

        Args:
            name: The name of the widget.
            id: The ID of the widget in the DOM.
            classes: The CSS classes for the widget.
            disabled: Whether the widget is disabled.
        """
        super().__init__(name=name, id=id, classes=classes, disabled=disabled)
        self.nodes: list[Node] = []

    def compose(self) -> ComposeResult:
        """Create the cluster status layout."""
        yield Static("[bold]🖥️  Cluster Status[/bold]", id="cluster-title")
        yield Static("[dim]Loading node data...[/dim]", id="cluster-summary")
        yield DataTable(id="nodes_table")

    def on_mount(self) -> None:
        """Initialize the data table."""
        nodes_table = self.query_one("#nodes_table", DataTable)
        nodes_table.cursor_type = "row"
        nodes_table.add_columns("Node", "Status", "CPUs", "CPU%", "Memory", "Mem%", "Jobs")

    def update_snapshot(self, snapshot: ClusterSnapshot) -> None:
        """Update the node table and summary line from a snapshot.

        Args:
            snapshot: Snapshot whose nodes are displayed.
        """
        self.nodes = list(snapshot.nodes)
        nodes_table = self.query_one("#nodes_table", DataTable)
        cursor_row = nodes_table.cursor_row

        nodes_table.clear()
        for node in self.nodes:
            nodes_table.add_row(
                node.name,
                format_node_status(node.status),
                f"{node.used_cpus}/{node.total_cpus}",
                format_pct(node.cpu_usage_pct),
                format_gb(node.used_memory_gb, node.total_memory_gb),
                format_pct(node.memory_usage_pct),
                ", ".join(node.jobs) if node.jobs else "-",
            )

        if cursor_row is not None and nodes_table.row_count > 0:
            nodes_table.move_cursor(row=min(cursor_row, nodes_table.row_count - 1))

        self.query_one("#cluster-summary", Static).update(self._render_summary(snapshot))

    def _render_summary(self, snapshot: ClusterSnapshot) -> str:
        """Render node counts per status and cluster-wide CPU usage.

        Args:
            snapshot: Snapshot to summarize.

        Returns:
            Summary string with Rich markup.
        """
        if not snapshot.nodes:
            return "[dim]No node information available[/dim]"

        counts = snapshot.node_status_counts()
        parts = [f"{format_node_status(status)}: {count}" for status, count in counts.items()]
        used, total = snapshot.cpu_totals()
        pct = snapshot.cpu_usage_pct
        return (
            f"{len(snapshot.nodes)} nodes  " + "  ".join(parts) + "\n"
            f"CPUs {used}/{total}  {format_bar(pct)} {format_pct(pct)}"
        )
