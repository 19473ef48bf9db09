"""ORM model registry — import all models so Base.metadata knows every table."""

from election_importer.models.candidate import Candidate
from election_importer.models.precinct import Precinct
from election_importer.models.result import ElectionResult
from election_importer.models.voter import Voter
from election_importer.models.voter_history import VoterHistory

__all__ = [
    "Candidate",
    "ElectionResult",
    "Precinct",
    "Voter",
    "VoterHistory",
]
