"""Size normalization for PBS resource strings.

PBS reports sizes like ``263682604kb``, ``16gb`` or a bare byte count. Memory
values are shown in gigabytes while storage values are kept in bytes, so the
canonical unit is chosen by the caller.
"""

import re
from enum import Enum

from pbsmon.pbs.results import Parsed, Unparseable, value_or

SIZE_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)([kmgt])?$", re.IGNORECASE)

# Power of 1024 for each unit prefix, relative to bytes
UNIT_EXPONENTS: dict[str, int] = {
    "": 0,
    "k": 1,
    "m": 2,
    "g": 3,
    "t": 4,
}


class SizeUnit(Enum):
    """Canonical unit a size is expressed in after normalization."""

    BYTES = 0
    GB = 3


def parse_size(token: str | None, unit: SizeUnit = SizeUnit.GB) -> Parsed[float] | Unparseable:
    """Parse a size token into the given canonical unit.

    A trailing ``b`` is dropped before the unit prefix is matched, so ``kb``
    and ``k`` mean the same thing. A token without a prefix is a byte count.

    Args:
        token: Raw size token (e.g. "16gb", "512mb", "1024").
        unit: Canonical unit for the result.

    Returns:
        Parsed with the converted magnitude, or Unparseable.
    """
    if token is None:
        return Unparseable(None, "missing")

    cleaned = token.strip()
    if cleaned[-1:].lower() == "b":
        cleaned = cleaned[:-1]

    match = SIZE_PATTERN.match(cleaned)
    if not match:
        return Unparseable(token, "not a size")

    digits = match.group(1)
    prefix = (match.group(2) or "").lower()
    exponent = UNIT_EXPONENTS[prefix] - unit.value
    # Whole byte counts stay integers; filesystems report sizes beyond 2**53
    if unit is SizeUnit.BYTES and "." not in digits:
        return Parsed(int(digits) * 1024**exponent)
    return Parsed(float(digits) * 1024.0**exponent)


def to_gigabytes(token: str | None) -> float:
    """Convert a size token to gigabytes, or 0 when it cannot be parsed."""
    return value_or(parse_size(token, SizeUnit.GB), 0.0)


def to_bytes(token: str | None) -> float:
    """Convert a size token to bytes, or 0 when it cannot be parsed."""
    return value_or(parse_size(token, SizeUnit.BYTES), 0.0)
