"""Voter history extract parser.

Parses the pipe-delimited 5-column voter history format: VoterHistoryID,
CountyCode, CountyCodeVoting, StateVoterID, ElectionDate.
"""

import csv
from collections.abc import Iterator
from datetime import date
from typing import TextIO

from dateutil.parser import parse as parse_date

from election_importer.lib.importer.reader import iter_rows

# Positional column order → VoterHistory model field
VOTER_HISTORY_COLUMNS: tuple[str, ...] = (
    "voter_history_id",
    "county_code",
    "county_code_voting",
    "state_voter_id",
    "election_date",
)

VOTER_HISTORY_FIELD_COUNT = len(VOTER_HISTORY_COLUMNS)


def _parse_date(value: str) -> date | None:
    """Parse an election date in any common layout (e.g., MM/DD/YYYY, YYYY-MM-DD).

    Args:
        value: Date string.

    Returns:
        Parsed date or None if unparseable.
    """
    try:
        return parse_date(value).date()
    except (ValueError, OverflowError):
        return None


def _process_row(line: int, fields: list[str], widths: dict[str, int | None]) -> dict:
    """Process a single extract row into a record dict.

    Only the field count and the voter_history_id are validated here. The
    state_voter_id may be None, since rows for unknown voters are skipped
    rather than rejected. A date problem is reported separately in
    ``_date_error`` so the caller can ignore it for rows it skips.

    Args:
        line: Source line number.
        fields: Raw fields from the reader.
        widths: Per-field maximum lengths; values are truncated.

    Returns:
        Record dict with parsed fields, the source ``line``, a
        ``_parse_error`` key (None if valid, error message if invalid) and
        a ``_date_error`` key.
    """
    if len(fields) < VOTER_HISTORY_FIELD_COUNT:
        return {
            "line": line,
            "_parse_error": f"Expected {VOTER_HISTORY_FIELD_COUNT} fields, found {len(fields)}",
            "_date_error": None,
        }

    row: dict[str, str | None] = {}
    for i, name in enumerate(VOTER_HISTORY_COLUMNS):
        value = fields[i].strip() or None
        limit = widths.get(name)
        row[name] = value[:limit] if value and limit else value

    error = None if row["voter_history_id"] else "Missing voter_history_id"

    date_text = row["election_date"]
    parsed_date = _parse_date(date_text) if date_text else None
    date_error: str | None = None
    if date_text is None:
        date_error = "Missing election_date"
    elif parsed_date is None:
        date_error = f"Invalid date format: {date_text}"

    return {
        "line": line,
        "voter_history_id": row["voter_history_id"],
        "county_code": row["county_code"],
        "county_code_voting": row["county_code_voting"],
        "state_voter_id": row["state_voter_id"],
        "election_date": parsed_date,
        "_parse_error": error,
        "_date_error": date_error,
    }


def parse_voter_history_rows(text: TextIO, widths: dict[str, int | None] | None = None) -> Iterator[dict]:
    """Parse a voter history extract row by row.

    The header row is skipped and quote characters are treated literally.

    Args:
        text: Decoded text stream of the extract.
        widths: Optional per-field maximum lengths (from the model columns).

    Yields:
        Record dicts as produced by :func:`_process_row`.
    """
    for line, fields in iter_rows(text, delimiter="|", skip_header=True, quoting=csv.QUOTE_NONE):
        yield _process_row(line, fields, widths or {})
