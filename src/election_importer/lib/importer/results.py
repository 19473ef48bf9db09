"""Election results CSV row parsing.

Results files are comma delimited with no header and exactly five columns:
race, candidate, precinct name, precinct number, votes. The election date
comes from an eight-digit ``YYYYMMDD`` filename prefix.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import PurePath

from loguru import logger

RESULTS_FIELD_COUNT = 5

# Aggregate row emitted by the results export; not a precinct result
TOTAL_PRECINCT_NAME = "Total"
TOTAL_PRECINCT_NUMBER = "-1"

_DATE_PREFIX = re.compile(r"^(\d{8})")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class ResultRow:
    """One parsed line of a results CSV."""

    line: int
    race: str
    candidate: str
    precinct_name: str
    precinct_number: str
    votes: int

    @property
    def is_total(self) -> bool:
        return self.precinct_name == TOTAL_PRECINCT_NAME and self.precinct_number == TOTAL_PRECINCT_NUMBER


def election_date_from_filename(filename: str, today: date | None = None) -> date:
    """Derive the election date from a results filename.

    Args:
        filename: Uploaded filename; any directory part is ignored.
        today: Fallback date; defaults to the current local date.

    Returns:
        The ``YYYYMMDD`` prefix as a date, or ``today`` when the name has no
        valid eight-digit prefix.
    """
    fallback = today or date.today()  # noqa: DTZ011
    match = _DATE_PREFIX.match(PurePath(filename).name)
    if match is None:
        return fallback
    try:
        # Date-only value; timezone is irrelevant
        return datetime.strptime(match.group(1), "%Y%m%d").date()  # noqa: DTZ007
    except ValueError:
        logger.warning(f"Filename {filename!r} has an invalid date prefix; using {fallback.isoformat()}")
        return fallback


def parse_vote_count(value: str) -> int:
    """Parse a vote count leniently: leading integer digits, otherwise zero.

    Args:
        value: Raw vote column text (e.g., ``"120"``, ``" 7 "``, ``"12abc"``).

    Returns:
        The parsed integer, or 0 when the text has no leading integer.
    """
    match = _LEADING_INT.match(value)
    if match is None:
        logger.warning(f"Non-numeric vote count {value!r} treated as 0")
        return 0
    return int(match.group(1))


def parse_result_row(line: int, fields: list[str]) -> ResultRow | None:
    """Parse one results CSV record.

    Args:
        line: Source line number.
        fields: Raw fields from the CSV reader.

    Returns:
        The parsed row, or None when the record does not have exactly
        ``RESULTS_FIELD_COUNT`` fields.
    """
    if len(fields) != RESULTS_FIELD_COUNT:
        return None
    race, candidate, precinct_name, precinct_number, votes = (f.strip() for f in fields)
    return ResultRow(
        line=line,
        race=race,
        candidate=candidate,
        precinct_name=precinct_name,
        precinct_number=precinct_number,
        votes=parse_vote_count(votes),
    )
