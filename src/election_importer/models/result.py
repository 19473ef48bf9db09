"""ElectionResult model — vote count for one candidate in one precinct."""

import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Date, ForeignKey, Index, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from election_importer.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from election_importer.models.candidate import Candidate


class ElectionResult(Base, UUIDMixin, TimestampMixin):
    """Per-precinct vote count imported from an election results CSV."""

    __tablename__ = "election_results"

    election_date: Mapped[date] = mapped_column(Date, nullable=False)
    candidate_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("election_candidates.id", ondelete="CASCADE"),
        nullable=False,
    )
    precinct_name: Mapped[str] = mapped_column(String(100), nullable=False)
    precinct_number: Mapped[str] = mapped_column(String(20), nullable=False)
    votes: Mapped[int] = mapped_column(Integer, nullable=False)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)

    candidate: Mapped["Candidate"] = relationship(back_populates="results")

    __table_args__ = (
        UniqueConstraint("candidate_id", "precinct_number", "election_date", name="uq_result_vote_record"),
        Index("idx_results_election_date", "election_date"),
        Index("idx_results_candidate_id", "candidate_id"),
    )
