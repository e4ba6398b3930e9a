"""Parser for detailed job listings (``qstat -f``).

Example input::

    Job Id: 1234.pbs-server
        Job_Name = molecular_sim
        Job_Owner = alice@login01.cluster
        job_state = R
        queue = batch
        Resource_List.ncpus = 64
        Resource_List.nodect = 4
        Resource_List.walltime = 24:00:00
        stime = Fri Mar 15 10:05:00 2024
"""

import re
from collections.abc import Mapping

from pbsmon.pbs.coerce import int_or_default, parse_choice, parse_text, text_or_default
from pbsmon.pbs.models import Job, JobStatus
from pbsmon.pbs.results import ParseError, ParseReport, collect_records, value_or

JOB_ID_MARKER = "Job Id:"
JOB_ID_KEY = "Job Id"

_MARKER_PATTERN = re.compile(rf"^{re.escape(JOB_ID_MARKER)}[ \t]*", re.MULTILINE)
# qstat -f wraps long attribute values onto lines starting with a tab
_CONTINUATION = "\n\t"
# Value runs until a comma or the end of the line
_FIELD_PATTERN = re.compile(r"^[ \t]*([\w.]+)[ \t]*=[ \t]*([^,\n]*)", re.MULTILINE)

STATUS_CODES: dict[str, JobStatus] = {
    "R": JobStatus.RUNNING,
    "Q": JobStatus.QUEUED,
    "C": JobStatus.COMPLETED,
    "E": JobStatus.ERROR,
}
DEFAULT_STATUS = JobStatus.QUEUED


def split_job_blocks(raw_output: str) -> list[str]:
    """Split a job listing into one block per job.

    Text before the first job id marker is not a job and is discarded.

    Args:
        raw_output: Raw output from the job listing command.

    Returns:
        Blocks starting with the job id line (marker removed).
    """
    segments = _MARKER_PATTERN.split(raw_output)
    return [segment for segment in segments[1:] if segment.strip()]


def tokenize_job_block(block: str) -> dict[str, str]:
    """Extract raw ``key = value`` pairs from one job block.

    Args:
        block: A single job block as returned by split_job_blocks.

    Returns:
        Mapping of attribute name to raw value. The job id is stored
        under JOB_ID_KEY.
    """
    joined = block.replace(_CONTINUATION, "")
    first_line, _, body = joined.partition("\n")

    fields: dict[str, str] = {JOB_ID_KEY: first_line.strip()}
    for match in _FIELD_PATTERN.finditer(body):
        key, value = match.groups()
        fields[key] = value.strip()
    return fields


def parse_job_status(code: str | None) -> JobStatus:
    """Map a raw job_state code to a JobStatus, defaulting to queued.

    Codes are matched case-insensitively, so ``r`` is running.
    """
    normalized = code.strip().upper() if code is not None else None
    return value_or(parse_choice(normalized, STATUS_CODES), DEFAULT_STATUS)


def _owner_name(raw: str | None) -> str:
    """Strip the ``@host`` realm suffix from a job owner."""
    if raw is None:
        return text_or_default(None)
    return text_or_default(raw.split("@", 1)[0])


def _optional_text(raw: str | None) -> str | None:
    return value_or(parse_text(raw), None)


def build_job(fields: Mapping[str, str]) -> Job:
    """Build a Job from tokenized fields.

    Args:
        fields: Mapping produced by tokenize_job_block.

    Returns:
        The typed job record.

    Raises:
        ParseError: If the job id is missing.
    """
    job_id = fields.get(JOB_ID_KEY, "").strip()
    if not job_id:
        raise ParseError("Job block has no job id")

    return Job(
        job_id=job_id,
        name=text_or_default(fields.get("Job_Name")),
        owner=_owner_name(fields.get("Job_Owner")),
        queue=text_or_default(fields.get("queue")),
        status=parse_job_status(fields.get("job_state")),
        nodes=int_or_default(fields.get("Resource_List.nodect")),
        ncpus=int_or_default(fields.get("Resource_List.ncpus")),
        mpiprocs=int_or_default(fields.get("Resource_List.mpiprocs")),
        walltime=text_or_default(fields.get("Resource_List.walltime")),
        start_time=_optional_text(fields.get("stime")),
        submit_time=_optional_text(fields.get("qtime")),
        walltime_used=_optional_text(fields.get("resources_used.walltime")),
    )


def parse_job_block(block: str) -> Job:
    """Parse one job block into a Job.

    Raises:
        ParseError: If the block cannot produce a job.
    """
    try:
        return build_job(tokenize_job_block(block))
    except ParseError as exc:
        raise ParseError(str(exc.args[0]), section=block) from exc


def parse_job_listing(raw_output: str) -> ParseReport[Job]:
    """Parse a full job listing, keeping track of dropped blocks.

    Args:
        raw_output: Raw output from the job listing command.

    Returns:
        Report with the parsed jobs and the blocks that failed.
    """
    return collect_records(split_job_blocks(raw_output), parse_job_block, "job")


def parse_jobs(raw_output: str) -> list[Job]:
    """Parse a full job listing into jobs, dropping malformed blocks.

    Args:
        raw_output: Raw output from the job listing command.

    Returns:
        List of jobs in listing order.
    """
    return parse_job_listing(raw_output).records
