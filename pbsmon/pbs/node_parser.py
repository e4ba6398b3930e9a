"""Parser for node listings (``pbsnodes -a``).

Example input::

    compute-01
         Mom = compute-01
         state = job-exclusive
         jobs = 1234.pbs-server/0, 1234.pbs-server/1
         resources_available.ncpus = 64
         resources_available.mem = 263682604kb
         resources_assigned.mem = 0kb

    compute-02
         state = free
         resources_available.ncpus = 64
"""

import re
from collections.abc import Mapping

from pbsmon.pbs.coerce import int_or_default
from pbsmon.pbs.models import Node, NodeStatus
from pbsmon.pbs.results import ParseError, ParseReport, Parsed, collect_records, value_or
from pbsmon.pbs.units import SizeUnit, parse_size

NODE_NAME_KEY = "name"
EXCLUSIVE_STATE = "job-exclusive"

_SECTION_SEPARATOR = re.compile(r"\n[ \t\r]*\n")
# Accepts both "key = value" and "key=value"
_FIELD_PATTERN = re.compile(r"^[ \t]*([\w.]+)[ \t]*=[ \t]*(.*?)[ \t]*$", re.MULTILINE)

# Checked in order; the first keyword found in the state wins
STATE_PRECEDENCE: tuple[tuple[str, NodeStatus], ...] = (
    ("down", NodeStatus.DOWN),
    ("offline", NodeStatus.OFFLINE),
    (EXCLUSIVE_STATE, NodeStatus.BUSY),
)


def split_node_sections(raw_output: str) -> list[str]:
    """Split a node listing on blank lines, discarding empty sections.

    CRLF line endings are normalized first.
    """
    sections = _SECTION_SEPARATOR.split(raw_output.replace("\r\n", "\n"))
    return [section.strip("\n") for section in sections if section.strip()]


def tokenize_node_section(section: str) -> dict[str, str]:
    """Extract the node name and raw ``key = value`` pairs from one section.

    Args:
        section: A single node section.

    Returns:
        Mapping of attribute name to raw value, with the node name stored
        under NODE_NAME_KEY.

    Raises:
        ParseError: If the first line is not a node name.
    """
    first_line, _, body = section.strip().partition("\n")
    name = first_line.strip()
    if not name or "=" in name:
        raise ParseError("Node section has no node name", section=section)

    fields: dict[str, str] = {NODE_NAME_KEY: name}
    for match in _FIELD_PATTERN.finditer(body):
        key, value = match.groups()
        fields[key] = value
    return fields


def derive_node_status(state: str) -> NodeStatus:
    """Classify a raw node state string.

    Down wins over offline, which wins over exclusive allocation. Anything
    else is free.
    """
    state_lower = state.lower()
    for keyword, status in STATE_PRECEDENCE:
        if keyword in state_lower:
            return status
    return NodeStatus.FREE


def _used_memory(fields: Mapping[str, str]) -> float:
    assigned = parse_size(fields.get("resources_assigned.mem"), SizeUnit.GB)
    if isinstance(assigned, Parsed):
        return assigned.value
    return value_or(parse_size(fields.get("resources_used.mem"), SizeUnit.GB), 0.0)


def _job_ids(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(token.strip() for token in raw.split(",") if token.strip())


def build_node(fields: Mapping[str, str]) -> Node:
    """Build a Node from tokenized fields.

    CPU usage is taken from exclusivity alone: an exclusive node uses all of
    its CPUs, any other node none. An exclusive node with no memory usage
    reported is assumed to use all of its memory.

    Args:
        fields: Mapping produced by tokenize_node_section.

    Returns:
        The typed node record.
    """
    state = fields.get("state", "")
    exclusive = EXCLUSIVE_STATE in state.lower()

    total_cpus = int_or_default(fields.get("resources_available.ncpus"))
    total_memory = value_or(parse_size(fields.get("resources_available.mem"), SizeUnit.GB), 0.0)
    used_memory = _used_memory(fields)
    if exclusive and used_memory == 0:
        used_memory = total_memory

    return Node(
        name=fields[NODE_NAME_KEY],
        status=derive_node_status(state),
        total_cpus=total_cpus,
        used_cpus=total_cpus if exclusive else 0,
        total_memory_gb=total_memory,
        used_memory_gb=used_memory,
        jobs=_job_ids(fields.get("jobs")),
    )


def parse_node_section(section: str) -> Node:
    """Parse one node section into a Node.

    Raises:
        ParseError: If the section has no node name.
    """
    return build_node(tokenize_node_section(section))


def parse_node_listing(raw_output: str) -> ParseReport[Node]:
    """Parse a full node listing, keeping track of dropped sections.

    Args:
        raw_output: Raw output from the node listing command.

    Returns:
        Report with the parsed nodes and the sections that failed.
    """
    return collect_records(split_node_sections(raw_output), parse_node_section, "node")


def parse_nodes(raw_output: str) -> list[Node]:
    """Parse a full node listing into nodes, dropping malformed sections."""
    return parse_node_listing(raw_output).records
