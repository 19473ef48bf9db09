"""Voter registration extract parsing.

Parses the pipe-delimited state voter-registration extract. Columns are
positional; only the fields the Voter model stores are mapped. Values are
stripped, blank values become None, strings are truncated to the model
column widths, birth years must be all digits, and registration/last-voted
dates are parsed from free-form text.
"""

from datetime import date
from typing import Any

from dateutil.parser import parse as parse_date

VOTER_MIN_FIELDS = 32

# Extract column index → Voter model field. Columns not listed (residence
# and mailing address parts, county code) are not stored.
VOTER_FILE_COLUMN_MAP: dict[int, str] = {
    0: "state_voter_id",
    1: "first_name",
    2: "middle_name",
    3: "last_name",
    4: "name_suffix",
    5: "birth_year",
    6: "gender",
    19: "precinct_code",
    20: "precinct_part",
    21: "legislative_district",
    22: "congressional_district",
    30: "registration_date",
    31: "last_voted",
    32: "status_code",
}

REQUIRED_FIELDS = ("state_voter_id",)

_DATE_FIELDS = frozenset({"registration_date", "last_voted"})


def parse_voter_date(value: str | None) -> date | None:
    """Parse a free-form date string; None when blank or unparseable."""
    if not value:
        return None
    try:
        return parse_date(value).date()
    except (ValueError, OverflowError):
        return None


def parse_birth_year(value: str | None) -> int | None:
    """Accept a birth year only when it is all digits."""
    if value and value.isdigit():
        return int(value)
    return None


def _clean(value: str | None, limit: int | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    return value[:limit] if limit else value


def parse_voter_row(
    fields: list[str],
    widths: dict[str, int | None] | None = None,
) -> tuple[dict[str, Any] | None, str | None]:
    """Map a voter extract record to Voter model field values.

    Args:
        fields: Raw fields from the pipe-delimited reader.
        widths: Per-field maximum string lengths (from the model columns).

    Returns:
        Tuple of (record dict, error message). Exactly one is None.
    """
    if len(fields) < VOTER_MIN_FIELDS:
        return None, f"Expected at least {VOTER_MIN_FIELDS} fields, found {len(fields)}"

    widths = widths or {}
    record: dict[str, Any] = {}
    for index, name in VOTER_FILE_COLUMN_MAP.items():
        raw = fields[index] if index < len(fields) else None
        if name == "birth_year":
            record[name] = parse_birth_year(_clean(raw, None))
        elif name in _DATE_FIELDS:
            record[name] = parse_voter_date(_clean(raw, None))
        else:
            record[name] = _clean(raw, widths.get(name))

    missing = [name for name in REQUIRED_FIELDS if not record.get(name)]
    if missing:
        return None, f"Missing required field: {', '.join(missing)}"
    return record, None
