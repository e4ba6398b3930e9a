"""Outcome types shared by the PBS output parsers.

Coercions return either ``Parsed`` or ``Unparseable`` so that a legitimate
zero can be told apart from a value that could not be read. Section parsers
raise ``ParseError`` for a single malformed block, and ``collect_records``
turns a batch of blocks into the records that succeeded plus the failures.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from pbsmon.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")

# Maximum characters of an offending section quoted in log messages
_SECTION_PREVIEW_CHARS = 200


@dataclass(frozen=True)
class Parsed(Generic[T]):
    """A successfully coerced value."""

    value: T


@dataclass(frozen=True)
class Unparseable:
    """A raw value that could not be coerced."""

    raw: str | None
    reason: str = ""


ParseOutcome = Parsed[T] | Unparseable


def value_or(outcome: "Parsed[T] | Unparseable", default: T) -> T:
    """Collapse a tagged outcome to its value or a default.

    Args:
        outcome: The outcome of a coercion.
        default: Value to return when the outcome is Unparseable.

    Returns:
        The parsed value or the default.
    """
    if isinstance(outcome, Parsed):
        return outcome.value
    return default


class ParseError(Exception):
    """Raised when one section of a listing cannot become a record."""

    def __init__(self, message: str, section: str = "") -> None:
        super().__init__(message)
        self.section = section

    def __str__(self) -> str:
        message = super().__str__()
        if not self.section:
            return message
        preview = self.section.strip()
        if len(preview) > _SECTION_PREVIEW_CHARS:
            preview = preview[:_SECTION_PREVIEW_CHARS] + "..."
        return f"{message}: {preview!r}"


@dataclass
class ParseReport(Generic[R]):
    """Records parsed from a document and the sections that were dropped."""

    records: list[R] = field(default_factory=list)
    failures: list[ParseError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when no section was dropped."""
        return not self.failures


def collect_records(sections: Iterable[str], build: Callable[[str], R], kind: str) -> ParseReport[R]:
    """Build a record from each section, dropping and logging the failures.

    Args:
        sections: Raw text sections, one per record.
        build: Callable turning one section into a record. May raise ParseError.
        kind: Record kind used in log messages (e.g. "job", "node").

    Returns:
        A ParseReport with the successful records in input order.
    """
    report: ParseReport[R] = ParseReport()
    for section in sections:
        try:
            report.records.append(build(section))
        except ParseError as exc:
            logger.warning(f"Dropping unparseable {kind} section: {exc}")
            report.failures.append(exc)
    if report.failures:
        logger.debug(f"Parsed {len(report.records)} {kind} records, dropped {len(report.failures)}")
    return report
