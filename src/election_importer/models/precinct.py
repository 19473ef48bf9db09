"""Precinct model — district/precinct crosswalk, replaced wholesale on import."""

from datetime import datetime

from sqlalchemy import DateTime, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from election_importer.models.base import Base, UUIDMixin


class Precinct(Base, UUIDMixin):
    """One precinct part within a county district."""

    __tablename__ = "precincts"

    county_code: Mapped[str] = mapped_column(String(10), nullable=False)
    county_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    district_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    district_code: Mapped[str] = mapped_column(String(20), nullable=False)
    district_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    precinct_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    precinct_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    precinct_part: Mapped[str] = mapped_column(String(20), nullable=False)
    import_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("county_code", "district_code", "precinct_part", name="uq_precinct_part"),
        Index("idx_precincts_precinct_code", "precinct_code"),
    )
