"""TUI widgets for pbsmon."""

from pbsmon.widgets.cluster_status import ClusterStatus
from pbsmon.widgets.log_pane import LogPane
from pbsmon.widgets.user_storage import UserStorage

__all__ = [
    "ClusterStatus",
    "LogPane",
    "UserStorage",
]
