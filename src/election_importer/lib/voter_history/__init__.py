"""Voter history extract parsing library.

Public API for parsing pipe-delimited voter history files.
"""

from election_importer.lib.voter_history.parser import (
    VOTER_HISTORY_COLUMNS,
    VOTER_HISTORY_FIELD_COUNT,
    parse_voter_history_rows,
)

__all__ = [
    "VOTER_HISTORY_COLUMNS",
    "VOTER_HISTORY_FIELD_COUNT",
    "parse_voter_history_rows",
]
