"""pbsmon: terminal monitor for PBS clusters."""

__version__ = "0.1.0"
