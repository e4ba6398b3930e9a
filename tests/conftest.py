"""Shared test fixtures for pbsmon."""

import os
from pathlib import Path

import pytest

from tests.mocks import DATA_DIR, MOCKS_DIR


@pytest.fixture
def mock_pbs_path(monkeypatch: pytest.MonkeyPatch) -> Path:
    """Add mock PBS executables to PATH.

    This fixture prepends the mocks directory to PATH so that
    qstat and pbsnodes use our mock implementations.

    Returns:
        Path to the mocks directory.
    """
    current_path = os.environ.get("PATH", "")
    monkeypatch.setenv("PATH", f"{MOCKS_DIR}:{current_path}")
    return MOCKS_DIR


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the settings loader at an empty temporary directory."""
    config_dir = tmp_path / "config"
    monkeypatch.setenv("PBSMON_CONFIG_DIR", str(config_dir))
    return config_dir


@pytest.fixture
def sample_qstat_output() -> str:
    """Sample qstat -f output with a running and a queued job."""
    return (DATA_DIR / "qstat_f.txt").read_text()


@pytest.fixture
def sample_pbsnodes_output() -> str:
    """Sample pbsnodes -a output with busy, free and down nodes."""
    return (DATA_DIR / "pbsnodes_a.txt").read_text()


@pytest.fixture
def sample_storage_output() -> str:
    """Sample storage probe output with home and scratch volumes."""
    return "1000 5000 1200 3800\n20000 100000 25000 75000\n"
