"""VoterHistory ORM model — stores individual voter participation records."""

from datetime import date, datetime

from sqlalchemy import Date, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from election_importer.models.base import Base, UUIDMixin


class VoterHistory(Base, UUIDMixin):
    """A single voter's participation in a single election.

    The table only grows: records are never deleted by an import. The voter
    association is checked when a record is inserted (the voter must exist
    at that moment) rather than enforced with a foreign key, because the
    voters table is replaced wholesale on every registration import.
    """

    __tablename__ = "voter_history"

    voter_history_id: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    state_voter_id: Mapped[str] = mapped_column(String(20), nullable=False)
    county_code: Mapped[str | None] = mapped_column(String(10), nullable=True)
    county_code_voting: Mapped[str | None] = mapped_column(String(10), nullable=True)
    election_date: Mapped[date] = mapped_column(Date, nullable=False)
    import_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_voter_history_state_voter_id", "state_voter_id"),
        Index("idx_voter_history_election_date", "election_date"),
    )
