"""Candidate model — one ballot option in one race on one election date."""

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Date, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from election_importer.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from election_importer.models.result import ElectionResult


class Candidate(Base, UUIDMixin, TimestampMixin):
    """A candidate (or write-in option) appearing in a race.

    ``party`` is resolved once when the row is created and is only changed
    afterwards by an explicit manual edit, never by a results import.
    """

    __tablename__ = "election_candidates"

    candidate_name: Mapped[str] = mapped_column(String(255), nullable=False)
    race_name: Mapped[str] = mapped_column(String(255), nullable=False)
    election_date: Mapped[date] = mapped_column(Date, nullable=False)
    party: Mapped[str | None] = mapped_column(String(100), nullable=True)

    results: Mapped[list["ElectionResult"]] = relationship(
        back_populates="candidate",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("candidate_name", "race_name", "election_date", name="uq_candidate_race"),
        Index("idx_candidates_name_race", "candidate_name", "race_name"),
    )
