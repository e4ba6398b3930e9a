"""Tests for validation helpers."""

from pathlib import Path
from unittest.mock import patch

import pytest

from pbsmon.pbs.validation import ValidationError, get_current_username, resolve_executable, validate_username


class TestValidateUsername:
    """Tests for validate_username."""

    @pytest.mark.parametrize("username", ["testuser", "test_user", "test.user", "test-user", "user123"])
    def test_valid(self, username: str) -> None:
        assert validate_username(username) is True

    @pytest.mark.parametrize("username", ["test user", "test@user", "test;user", "../etc", ""])
    def test_invalid(self, username: str) -> None:
        with pytest.raises(ValidationError):
            validate_username(username)


class TestGetCurrentUsername:
    """Tests for get_current_username."""

    def test_returns_validated_name(self) -> None:
        with patch("pbsmon.pbs.validation.getpass.getuser", return_value="alice"):
            assert get_current_username() == "alice"

    def test_unsafe_name_raises(self) -> None:
        with (
            patch("pbsmon.pbs.validation.getpass.getuser", return_value="al ice"),
            pytest.raises(ValidationError),
        ):
            get_current_username()

    def test_lookup_failure_raises(self) -> None:
        with (
            patch("pbsmon.pbs.validation.getpass.getuser", side_effect=OSError("no user")),
            pytest.raises(ValidationError),
        ):
            get_current_username()


class TestResolveExecutable:
    """Tests for resolve_executable."""

    def test_table_wins(self) -> None:
        assert resolve_executable("qstat", {"qstat": "/opt/pbs/bin/qstat"}) == "/opt/pbs/bin/qstat"

    def test_path_lookup(self, mock_pbs_path: Path) -> None:
        assert resolve_executable("qstat") == str(mock_pbs_path / "qstat")

    def test_not_found(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("PATH", str(tmp_path))
        with pytest.raises(FileNotFoundError):
            resolve_executable("qstat", {"pbsnodes": "/opt/pbs/bin/pbsnodes"})
