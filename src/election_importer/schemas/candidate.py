"""Candidate Pydantic v2 response schemas."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field


class CandidateResponse(BaseModel):
    """A candidate row as shown in candidate listings."""

    id: UUID
    candidate_name: str
    race_name: str
    election_date: date
    party: str | None = None

    model_config = {"from_attributes": True}


class CandidateFilterOptions(BaseModel):
    """Distinct values available for filtering the candidate listing."""

    election_dates: list[date] = Field(default_factory=list, description="Newest first")
    races: list[str] = Field(default_factory=list, description="Alphabetical")
    parties: list[str] = Field(default_factory=list, description="Alphabetical, empty parties excluded")
