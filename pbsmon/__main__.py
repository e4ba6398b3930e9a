"""Command-line entry point for pbsmon."""

import sys
import traceback

from pbsmon.app import main


def run() -> None:
    """Start the monitor, printing a plain traceback if it crashes."""
    try:
        main()
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception:
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    run()
