"""Mock PBS executables used by the test suite."""

from pathlib import Path

MOCKS_DIR = Path(__file__).parent
DATA_DIR = MOCKS_DIR / "data"
