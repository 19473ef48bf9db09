"""Voter model — registration record from the state voter-registration extract."""

from datetime import date, datetime

from sqlalchemy import Date, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from election_importer.models.base import Base, UUIDMixin


class Voter(Base, UUIDMixin):
    """Individual voter record. The table is replaced wholesale by each import.

    Column widths double as the truncation limits applied by the importer.
    """

    __tablename__ = "voters"

    state_voter_id: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)

    # Name fields
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    middle_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    name_suffix: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Demographics
    birth_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(10), nullable=True)

    # Registration
    registration_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    last_voted: Mapped[date | None] = mapped_column(Date, nullable=True)
    status_code: Mapped[str | None] = mapped_column(String(10), nullable=True)

    # Districts
    precinct_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    precinct_part: Mapped[str | None] = mapped_column(String(20), nullable=True)
    legislative_district: Mapped[str | None] = mapped_column(String(10), nullable=True)
    congressional_district: Mapped[str | None] = mapped_column(String(10), nullable=True)

    import_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_voters_name_search", "last_name", "first_name"),
        Index("ix_voters_precinct", "precinct_code", "precinct_part"),
    )
