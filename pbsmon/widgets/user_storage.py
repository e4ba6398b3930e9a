"""User storage utilization widget."""

from typing import ClassVar

from textual.widgets import Static

from pbsmon.pbs.formatters import BAR_WIDTH, format_bar, format_bytes, format_pct
from pbsmon.pbs.models import StorageUsageRecord


class UserStorage(Static):
    """Widget showing usage of the user's home and scratch volumes."""

    DEFAULT_CSS: ClassVar[str] = """
    UserStorage {
        height: auto;
        width: 100%;
        border: round $primary;
        padding: 0 1;
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
        """Initialize the UserStorage widget.

        Args:
            name: The name of the widget.
            id: The ID of the widget in the DOM.
            classes: The CSS classes for the widget.
            disabled: Whether the widget is disabled.
        """
        super().__init__("", name=name, id=id, classes=classes, disabled=disabled)
        self.records: list[StorageUsageRecord] = []
        self._data_loaded: bool = False

    def on_mount(self) -> None:
        """Show a loading message until data arrives."""
        self.update(self._render_records())

    def update_storage(self, records: list[StorageUsageRecord]) -> None:
        """Update the displayed storage records.

        Args:
            records: Storage records to display.
        """
        self.records = records
        self._data_loaded = True
        self.update(self._render_records())

    def _render_records(self) -> str:
        """Render one usage bar per volume.

        Returns:
            Formatted string with Rich markup.
        """
        lines = ["[bold]💾 User Storage Utilization[/bold]"]
        if not self._data_loaded:
            lines.append("[dim]Loading storage data...[/dim]")
            return "\n".join(lines)
        if not self.records:
            lines.append("[dim]No storage information available[/dim]")
            return "\n".join(lines)

        for record in self.records:
            lines.append(
                f"[bold]{record.mount_point}[/bold] ({record.path})  "
                f"{format_bar(record.usage_pct, BAR_WIDTH)} {format_pct(record.usage_pct)}  "
                f"{format_bytes(record.used)} / {format_bytes(record.total)}, "
                f"available: {format_bytes(record.available)}"
            )
        return "\n".join(lines)
