"""Field coercion shared by the PBS parsers.

Tokenizers hand raw strings to these helpers. Each ``parse_*`` function
returns a tagged outcome; the ``*_or_default`` helpers collapse it to the
documented fallback (0 for numbers, "N/A" for text).
"""

import re
from collections.abc import Mapping
from typing import TypeVar

from pbsmon.pbs.results import Parsed, Unparseable, value_or

T = TypeVar("T")

TEXT_PLACEHOLDER = "N/A"

# [[days:]hours:]minutes:seconds, as printed for walltime
DURATION_PATTERN = re.compile(r"^(?:(?:(\d+):)?(\d+):)?(\d+):(\d{1,2})$")


def parse_int(raw: str | None) -> Parsed[int] | Unparseable:
    """Parse a base-10 integer field."""
    if raw is None:
        return Unparseable(None, "missing")
    try:
        return Parsed(int(raw.strip()))
    except ValueError:
        return Unparseable(raw, "not an integer")


def int_or_default(raw: str | None, default: int = 0) -> int:
    """Parse an integer field, falling back to a default."""
    return value_or(parse_int(raw), default)


def parse_text(raw: str | None) -> Parsed[str] | Unparseable:
    """Parse a free text field; blank values count as missing."""
    if raw is None or not raw.strip():
        return Unparseable(raw, "missing")
    return Parsed(raw.strip())


def text_or_default(raw: str | None, default: str = TEXT_PLACEHOLDER) -> str:
    """Parse a text field, falling back to the N/A placeholder."""
    return value_or(parse_text(raw), default)


def parse_choice(raw: str | None, choices: Mapping[str, T]) -> Parsed[T] | Unparseable:
    """Map a raw code onto a closed set of values.

    Args:
        raw: Raw code as printed by the scheduler.
        choices: Mapping from code to value.

    Returns:
        Parsed with the mapped value, or Unparseable for unknown codes.
    """
    if raw is None:
        return Unparseable(None, "missing")
    code = raw.strip()
    if code not in choices:
        return Unparseable(raw, "unknown code")
    return Parsed(choices[code])


def parse_duration(raw: str | None) -> Parsed[int] | Unparseable:
    """Parse a walltime like "24:00:00" or "1:02:03:04" into seconds."""
    if raw is None:
        return Unparseable(None, "missing")
    match = DURATION_PATTERN.match(raw.strip())
    if not match:
        return Unparseable(raw, "not a duration")
    days, hours, minutes, seconds = (int(part) if part else 0 for part in match.groups())
    return Parsed(((days * 24 + hours) * 60 + minutes) * 60 + seconds)
