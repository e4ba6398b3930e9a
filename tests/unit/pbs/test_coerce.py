"""Tests for shared field coercion."""

import pytest

from pbsmon.pbs.coerce import (
    int_or_default,
    parse_choice,
    parse_duration,
    parse_int,
    parse_text,
    text_or_default,
)
from pbsmon.pbs.results import Parsed, Unparseable


class TestIntegers:
    """Tests for integer coercion."""

    def test_parse_int(self) -> None:
        assert parse_int(" 64 ") == Parsed(64)

    def test_parse_int_garbage(self) -> None:
        assert isinstance(parse_int("64cpus"), Unparseable)

    def test_int_or_default_missing(self) -> None:
        assert int_or_default(None) == 0

    def test_int_or_default_garbage(self) -> None:
        assert int_or_default("four") == 0

    def test_int_or_default_custom(self) -> None:
        assert int_or_default("x", default=-1) == -1


class TestText:
    """Tests for text coercion."""

    def test_parse_text_strips(self) -> None:
        assert parse_text("  batch ") == Parsed("batch")

    def test_blank_is_missing(self) -> None:
        assert isinstance(parse_text("   "), Unparseable)

    def test_text_or_default_placeholder(self) -> None:
        assert text_or_default(None) == "N/A"
        assert text_or_default("") == "N/A"


class TestChoice:
    """Tests for closed-set code mapping."""

    CHOICES = {"R": "running", "Q": "queued"}

    def test_known_code(self) -> None:
        assert parse_choice("R", self.CHOICES) == Parsed("running")

    def test_unknown_code(self) -> None:
        outcome = parse_choice("X", self.CHOICES)
        assert isinstance(outcome, Unparseable)
        assert outcome.raw == "X"

    def test_missing_code(self) -> None:
        assert isinstance(parse_choice(None, self.CHOICES), Unparseable)

    def test_codes_are_case_sensitive(self) -> None:
        assert isinstance(parse_choice("r", self.CHOICES), Unparseable)


class TestDuration:
    """Tests for walltime parsing."""

    @pytest.mark.parametrize(
        ("raw", "seconds"),
        [
            ("24:00:00", 86400),
            ("00:30:15", 1815),
            ("100:00:00", 360000),
            ("05:30", 330),
            ("1:02:03:04", 93784),
        ],
    )
    def test_valid_durations(self, raw: str, seconds: int) -> None:
        assert parse_duration(raw) == Parsed(seconds)

    @pytest.mark.parametrize("raw", ["", "N/A", "1h", "12", None])
    def test_invalid_durations(self, raw: str | None) -> None:
        assert isinstance(parse_duration(raw), Unparseable)
