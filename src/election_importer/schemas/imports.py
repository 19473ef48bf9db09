"""Import outcome Pydantic v2 schemas.

Every importer returns one of these models. Field names are the contract
with the presentation layer that renders import feedback: any entry in
``errors`` means the whole import was rolled back.
"""

from datetime import date

from pydantic import BaseModel, Field


class RowError(BaseModel):
    """A row-, batch-, or file-level problem recorded during an import."""

    line: int | None = Field(default=None, description="1-based source line, None for file-level errors")
    message: str

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"Line {self.line}: {self.message}"


class VoteMismatch(BaseModel):
    """Debug record for a result row whose stored vote count changed."""

    race: str
    candidate: str
    precinct_number: str
    old_votes: int
    new_votes: int

    def __str__(self) -> str:
        return (
            f"Vote mismatch - Race: {self.race}, Option: {self.candidate}, "
            f"Precinct: {self.precinct_number}, Old: {self.old_votes}, New: {self.new_votes}"
        )


class ResultsImportOutcome(BaseModel):
    """Outcome of an election results CSV import."""

    filename: str
    election_date: date | None = None
    added: int = 0
    updated: int = 0
    skipped: int = 0
    errors: list[RowError] = Field(default_factory=list)
    debug: list[VoteMismatch] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


class ReplaceImportOutcome(BaseModel):
    """Outcome of a full-replace import (precincts or voters)."""

    success: bool = False
    message: str = ""
    count: int = 0
    errors: list[RowError] = Field(default_factory=list)


class VoterHistoryImportOutcome(BaseModel):
    """Outcome of an additive voter history import.

    ``skipped`` counts orphan rows (voter not registered) and duplicates;
    neither is an error.
    """

    success: bool = False
    message: str = ""
    count: int = 0
    skipped: int = 0
    errors: list[RowError] = Field(default_factory=list)
