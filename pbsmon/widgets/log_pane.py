"""Log pane widget for displaying application logs in the TUI.

Probe failures are logged again on every refresh cycle, so consecutive
identical entries are collapsed into a single "repeated" line.
"""

from datetime import datetime
from typing import ClassVar

from rich.text import Text
from textual.widgets import RichLog

PACKAGE_PREFIX = "pbsmon."


class LogPane(RichLog):
    """Widget to display application logs in real-time."""

    DEFAULT_CSS: ClassVar[str] = """
    LogPane {
        height: 8;
        width: 100%;
        scrollbar-size: 1 1;
    }
    """

    LEVEL_COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "dim cyan",
        "INFO": "green",
        "SUCCESS": "bold green",
        "WARNING": "yellow",
        "ERROR": "bold red",
        "CRITICAL": "bold white on red",
    }

    def __init__(
        self,
        max_lines: int | None = 1000,
        *,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
        disabled: bool = False,
    ) -> None:
        """Initialize the LogPane widget.

        Args:
            max_lines: Maximum number of log lines to retain (None for unlimited).
            name: The name of the widget.
            id: The ID of the widget in the DOM.
            classes: The CSS classes for the widget.
            disabled: Whether the widget is disabled.
        """
        super().__init__(
            highlight=False,
            markup=False,
            wrap=True,
            max_lines=max_lines,
            auto_scroll=True,
            name=name,
            id=id,
            classes=classes,
            disabled=disabled,
        )
        self._last_entry: tuple[str, str | None, str] | None = None
        self.repeat_count = 0

    def add_log(
        self,
        level: str,
        message: str,
        timestamp: datetime | None = None,
        source: str | None = None,
    ) -> None:
        """Add a log entry to the pane.

        Args:
            level: Log level (DEBUG, INFO, WARNING, ERROR, etc.).
            message: The log message.
            timestamp: Optional timestamp (defaults to now).
            source: Name of the module that logged the message.
        """
        level_upper = level.upper()
        entry = (level_upper, source, message)
        if entry == self._last_entry:
            self.repeat_count += 1
            return
        self._flush_repeats()
        self._last_entry = entry

        if timestamp is None:
            timestamp = datetime.now()

        log_text = Text()
        log_text.append(f"{timestamp:%H:%M:%S} ", style="dim")
        log_text.append(f"[{level_upper:^8}] ", style=self.LEVEL_COLORS.get(level_upper, "white"))
        if source:
            log_text.append(f"{source.removeprefix(PACKAGE_PREFIX)}: ", style="dim")
        log_text.append(message)
        self.write(log_text)

    def _flush_repeats(self) -> None:
        if self.repeat_count:
            self.write(Text(f"         (previous message repeated {self.repeat_count} times)", style="dim"))
            self.repeat_count = 0

    def sink(self, message: object) -> None:
        """Loguru sink function receiving log messages.

        Args:
            message: Loguru message object.
        """
        record = getattr(message, "record", None)
        if record is None:
            return
        level = record["level"].name
        timestamp = record["time"].replace(tzinfo=None)
        source = record["extra"].get("name")

        # Messages logged from worker threads must be handed to the app thread
        try:
            self.app.call_from_thread(self.add_log, level, str(record["message"]), timestamp, source)
        except RuntimeError:
            self.add_log(level, str(record["message"]), timestamp, source)
