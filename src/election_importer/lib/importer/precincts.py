"""Precinct CSV row parsing.

Precinct files are comma delimited with a header row and eight data
columns. Extra trailing columns are ignored.
"""

from typing import Any

# Positional column order → Precinct model field
PRECINCT_COLUMNS: tuple[str, ...] = (
    "county_code",
    "county_name",
    "district_type",
    "district_code",
    "district_name",
    "precinct_code",
    "precinct_name",
    "precinct_part",
)

PRECINCT_FIELD_COUNT = len(PRECINCT_COLUMNS)


def parse_precinct_row(fields: list[str], widths: dict[str, int | None] | None = None) -> dict[str, Any] | None:
    """Map a precinct CSV record to model field values.

    Args:
        fields: Raw fields from the CSV reader.
        widths: Optional per-field maximum lengths; values are truncated.

    Returns:
        Dict of stripped field values, or None when the record has fewer
        than ``PRECINCT_FIELD_COUNT`` fields.
    """
    if len(fields) < PRECINCT_FIELD_COUNT:
        return None
    record: dict[str, Any] = {}
    for name, raw in zip(PRECINCT_COLUMNS, fields, strict=False):
        value = raw.strip()
        limit = (widths or {}).get(name)
        record[name] = value[:limit] if limit else value
    return record
