"""Parser for the disk usage probe output.

The probe prints four numbers for the home directory and, when a scratch
directory exists, four more for scratch, always in this order::

    home_used home_total home_used_df home_avail
    scratch_used scratch_total scratch_used_df scratch_avail
"""

from dataclasses import dataclass

from pbsmon.logger import get_logger
from pbsmon.pbs.models import StorageUsageRecord
from pbsmon.pbs.results import ParseError, Parsed
from pbsmon.pbs.units import SizeUnit, parse_size

logger = get_logger(__name__)

FIELDS_PER_VOLUME = 4
HOME_LABEL = "Home Directory"
SCRATCH_LABEL = "Scratch Directory"

# Offsets inside one volume's group of four tokens
_USED = 0
_TOTAL = 1
_AVAILABLE = 3


@dataclass(frozen=True)
class VolumeLayout:
    """Where a volume lives and how it is labelled."""

    label: str
    path: str


def default_volumes(username: str, home_root: str = "/home", scratch_root: str = "/scratch") -> list[VolumeLayout]:
    """Return the home and scratch volumes for a user, in probe order."""
    return [
        VolumeLayout(HOME_LABEL, f"{home_root.rstrip('/')}/{username}"),
        VolumeLayout(SCRATCH_LABEL, f"{scratch_root.rstrip('/')}/{username}"),
    ]


def tokenize_storage_output(raw_output: str) -> list[int | float]:
    """Flatten probe output into byte counts in positional order.

    Args:
        raw_output: Raw probe output.

    Returns:
        Byte counts, 4 or 8 of them.

    Raises:
        ParseError: If a token is not a number or the count is wrong.
    """
    tokens = raw_output.split()
    if len(tokens) not in (FIELDS_PER_VOLUME, 2 * FIELDS_PER_VOLUME):
        raise ParseError(f"Expected 4 or 8 storage values, got {len(tokens)}", section=raw_output)

    values: list[int | float] = []
    for token in tokens:
        outcome = parse_size(token, SizeUnit.BYTES)
        if not isinstance(outcome, Parsed):
            raise ParseError(f"Invalid storage value {token!r}", section=raw_output)
        values.append(outcome.value)
    return values


def build_storage_records(values: list[int | float], volumes: list[VolumeLayout]) -> list[StorageUsageRecord]:
    """Build one record per volume whose total capacity is positive."""
    records: list[StorageUsageRecord] = []
    for index, volume in enumerate(volumes):
        group = values[index * FIELDS_PER_VOLUME : (index + 1) * FIELDS_PER_VOLUME]
        if len(group) < FIELDS_PER_VOLUME or group[_TOTAL] <= 0:
            continue
        records.append(
            StorageUsageRecord(
                mount_point=volume.label,
                path=volume.path,
                total=int(group[_TOTAL]),
                used=int(group[_USED]),
                available=int(group[_AVAILABLE]),
            )
        )
    return records


def parse_storage(raw_output: str, volumes: list[VolumeLayout]) -> list[StorageUsageRecord]:
    """Parse probe output into storage records.

    Any malformed output yields no records at all.

    Args:
        raw_output: Raw probe output.
        volumes: Volume layouts in probe order (see default_volumes).

    Returns:
        Records for the volumes that exist.
    """
    try:
        values = tokenize_storage_output(raw_output)
    except ParseError as exc:
        logger.warning(f"Discarding storage probe output: {exc}")
        return []
    return build_storage_records(values, volumes)
