"""Importer library public API.

Provides stream decoding, delimited row iteration, and per-format row
parsing for results, precinct, and voter registration files.
"""

from election_importer.lib.importer.errors import ImportAbortedError
from election_importer.lib.importer.precincts import PRECINCT_COLUMNS, PRECINCT_FIELD_COUNT, parse_precinct_row
from election_importer.lib.importer.reader import detect_encoding, iter_rows, open_text_stream
from election_importer.lib.importer.results import (
    RESULTS_FIELD_COUNT,
    ResultRow,
    election_date_from_filename,
    parse_result_row,
    parse_vote_count,
)
from election_importer.lib.importer.voters import (
    VOTER_FILE_COLUMN_MAP,
    VOTER_MIN_FIELDS,
    parse_birth_year,
    parse_voter_date,
    parse_voter_row,
)

__all__ = [
    "PRECINCT_COLUMNS",
    "PRECINCT_FIELD_COUNT",
    "RESULTS_FIELD_COUNT",
    "VOTER_FILE_COLUMN_MAP",
    "VOTER_MIN_FIELDS",
    "ImportAbortedError",
    "ResultRow",
    "detect_encoding",
    "election_date_from_filename",
    "iter_rows",
    "open_text_stream",
    "parse_birth_year",
    "parse_precinct_row",
    "parse_result_row",
    "parse_vote_count",
    "parse_voter_date",
    "parse_voter_row",
]
