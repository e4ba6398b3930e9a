"""PBS command execution.

``run_command`` is the only place that spawns processes. The fetchers wrap
it and hand the captured text to the parsers; a probe that fails for any
reason yields an empty list for its resource class.
"""

import os
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol

from pbsmon.logger import get_logger
from pbsmon.pbs.job_parser import parse_jobs
from pbsmon.pbs.models import Job, Node, StorageUsageRecord
from pbsmon.pbs.node_parser import parse_nodes
from pbsmon.pbs.storage_parser import default_volumes, parse_storage
from pbsmon.pbs.validation import ValidationError, get_current_username, resolve_executable, validate_username
from pbsmon.settings import Settings

logger = get_logger(__name__)

STORAGE_PROBE = Path(__file__).parent / "scripts" / "storage_probe.sh"

# Keep du/df output free of locale-specific formatting
PROBE_ENV: dict[str, str] = {"LC_ALL": "C"}


class CommandError(Exception):
    """Raised when an external command cannot be run or fails."""

    def __init__(self, message: str, command: Sequence[str] = (), output: str = "") -> None:
        super().__init__(message)
        self.command = list(command)
        self.output = output


class CommandRunner(Protocol):
    """Callable that runs an executable and returns its combined output."""

    def __call__(
        self,
        executable: str,
        args: Sequence[str],
        env: Mapping[str, str] | None = None,
        timeout: float = ...,
    ) -> str:
        """Run the command and return stdout with stderr merged in."""
        ...


def run_command(
    executable: str,
    args: Sequence[str],
    env: Mapping[str, str] | None = None,
    timeout: float = 10.0,
) -> str:
    """Run an external command and return its output.

    Standard error is merged into standard output. Bytes that are not valid
    UTF-8 are replaced so one badly encoded job name cannot hide the rest.

    Args:
        executable: Path to the executable.
        args: Arguments passed to the executable.
        env: Variables added to the current environment.
        timeout: Seconds to wait before giving up.

    Returns:
        The captured output text.

    Raises:
        CommandError: If the command cannot be started, times out or exits non-zero.
    """
    command = [executable, *args]
    process_env = {**os.environ, **env} if env else None
    logger.debug(f"Running command: {' '.join(command)}")

    try:
        result = subprocess.run(  # noqa: S603
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
            env=process_env,
        )
    except OSError as exc:
        raise CommandError(f"Could not run {executable}: {exc}", command) from exc
    except subprocess.TimeoutExpired as exc:
        raise CommandError(f"{executable} timed out after {timeout}s", command) from exc
    except subprocess.SubprocessError as exc:
        raise CommandError(f"Error running {executable}: {exc}", command) from exc
    except ValueError as exc:
        # Covers UnicodeDecodeError and arguments containing NUL bytes
        raise CommandError(f"Error running {executable}: {exc}", command) from exc

    if result.returncode != 0:
        message = result.stdout.strip() or f"exit code {result.returncode}"
        raise CommandError(f"{executable} failed: {message}", command, result.stdout)

    return result.stdout


def fetch_jobs(settings: Settings | None = None, runner: CommandRunner = run_command) -> list[Job]:
    """Return all jobs from the detailed job listing.

    Args:
        settings: Settings providing executable paths and timeout.
        runner: Command runner used to invoke qstat.

    Returns:
        Parsed jobs, or an empty list if qstat cannot be run.
    """
    settings = settings or Settings()
    try:
        qstat = resolve_executable("qstat", settings.executable_paths)
        raw_output = runner(qstat, ["-f"], timeout=settings.command_timeout)
    except FileNotFoundError as exc:
        logger.error(f"qstat not found: {exc}")
        return []
    except CommandError as exc:
        logger.error(f"Error getting job listing: {exc}")
        return []

    jobs = parse_jobs(raw_output)
    logger.debug(f"Found {len(jobs)} jobs")
    return jobs


def fetch_nodes(settings: Settings | None = None, runner: CommandRunner = run_command) -> list[Node]:
    """Return all nodes from the node listing.

    Args:
        settings: Settings providing executable paths and timeout.
        runner: Command runner used to invoke pbsnodes.

    Returns:
        Parsed nodes, or an empty list if pbsnodes cannot be run.
    """
    settings = settings or Settings()
    try:
        pbsnodes = resolve_executable("pbsnodes", settings.executable_paths)
        raw_output = runner(pbsnodes, ["-a"], timeout=settings.command_timeout)
    except FileNotFoundError as exc:
        logger.error(f"pbsnodes not found: {exc}")
        return []
    except CommandError as exc:
        logger.error(f"Error getting node listing: {exc}")
        return []

    nodes = parse_nodes(raw_output)
    logger.debug(f"Found {len(nodes)} nodes")
    return nodes


def fetch_storage(
    settings: Settings | None = None,
    runner: CommandRunner = run_command,
    username: str | None = None,
) -> list[StorageUsageRecord]:
    """Return home and scratch usage for a user.

    Args:
        settings: Settings providing directory roots, executable paths and timeout.
        runner: Command runner used to invoke the probe script.
        username: User to report on; defaults to the current user.

    Returns:
        Storage records, or an empty list if the probe cannot be run.
    """
    settings = settings or Settings()
    try:
        if username is None:
            username = get_current_username()
        else:
            validate_username(username)
        volumes = default_volumes(username, settings.home_root, settings.scratch_root)
        bash = resolve_executable("bash", settings.executable_paths)
        raw_output = runner(
            bash,
            [str(STORAGE_PROBE), *(volume.path for volume in volumes)],
            env=PROBE_ENV,
            timeout=settings.command_timeout,
        )
    except ValidationError as exc:
        logger.error(f"Cannot probe storage: {exc}")
        return []
    except FileNotFoundError as exc:
        logger.error(f"bash not found: {exc}")
        return []
    except CommandError as exc:
        logger.error(f"Error running storage probe: {exc}")
        return []

    records = parse_storage(raw_output, volumes)
    logger.debug(f"Found {len(records)} storage volumes for {username}")
    return records
