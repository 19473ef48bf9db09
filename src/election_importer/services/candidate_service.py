"""Candidate service — find-or-create resolution, party rules, and manual edits."""

import uuid
from datetime import date

from loguru import logger
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from election_importer.models.candidate import Candidate
from election_importer.schemas.candidate import CandidateFilterOptions

WRITE_IN_NAME = "WRITE-IN"
UNAFFILIATED_PARTY = "unaffiliated"

# Sentinel party filter value selecting candidates without a party
NO_PARTY_FILTER = "none"

_SORTABLE_COLUMNS = {
    "election_date": Candidate.election_date,
    "race_name": Candidate.race_name,
    "candidate_name": Candidate.candidate_name,
    "party": Candidate.party,
}


async def _find_candidate_id(
    session: AsyncSession,
    candidate_name: str,
    race_name: str,
    election_date: date,
) -> uuid.UUID | None:
    result = await session.execute(
        select(Candidate.id).where(
            Candidate.candidate_name == candidate_name,
            Candidate.race_name == race_name,
            Candidate.election_date == election_date,
        )
    )
    return result.scalar_one_or_none()


async def resolve_party(
    session: AsyncSession,
    candidate_name: str,
    race_name: str,
    election_date: date,
) -> str | None:
    """Determine the party for a candidate that is about to be created.

    Write-ins are always unaffiliated. Otherwise the party is inherited from
    the most recent earlier election in which the same candidate ran in the
    same race with a known party.

    Args:
        session: Database session.
        candidate_name: Candidate name as it appears in the results file.
        race_name: Race name.
        election_date: Date of the election being imported.

    Returns:
        The resolved party, or None when nothing is known.
    """
    if candidate_name.upper() == WRITE_IN_NAME:
        return UNAFFILIATED_PARTY

    result = await session.execute(
        select(Candidate.party)
        .where(
            Candidate.candidate_name == candidate_name,
            Candidate.race_name == race_name,
            Candidate.election_date < election_date,
            Candidate.party.is_not(None),
        )
        .order_by(Candidate.election_date.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def resolve_candidate(
    session: AsyncSession,
    candidate_name: str,
    race_name: str,
    election_date: date,
) -> uuid.UUID:
    """Find or create the candidate for (name, race, date) and return its id.

    The insert runs in a savepoint. If a concurrent writer created the same
    candidate first, the uniqueness violation is rolled back to the
    savepoint and the lookup is retried once.

    Args:
        session: Database session.
        candidate_name: Candidate name.
        race_name: Race name.
        election_date: Election date.

    Returns:
        The candidate id.

    Raises:
        IntegrityError: If the insert fails and no matching row exists.
    """
    candidate_id = await _find_candidate_id(session, candidate_name, race_name, election_date)
    if candidate_id is not None:
        return candidate_id

    party = await resolve_party(session, candidate_name, race_name, election_date)
    candidate = Candidate(
        candidate_name=candidate_name,
        race_name=race_name,
        election_date=election_date,
        party=party,
    )
    try:
        async with session.begin_nested():
            session.add(candidate)
    except IntegrityError:
        candidate_id = await _find_candidate_id(session, candidate_name, race_name, election_date)
        if candidate_id is None:
            raise
        logger.debug(f"Candidate {candidate_name!r} ({race_name}) was created concurrently; reusing it")
        return candidate_id

    logger.info(f"Created candidate {candidate_name!r} in {race_name!r} on {election_date} (party={party})")
    return candidate.id


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def list_candidates(
    session: AsyncSession,
    *,
    election_date: date | None = None,
    race: str | None = None,
    party: str | None = None,
    search: str | None = None,
    order_by: str = "election_date",
    order: str = "DESC",
) -> list[Candidate]:
    """List candidates with optional filters and whitelisted sorting.

    Args:
        session: Database session.
        election_date: Only candidates on this date.
        race: Only candidates in this race.
        party: Only this party; ``"none"`` selects candidates without a party.
        search: Case-insensitive substring of candidate or race name.
        order_by: One of election_date, race_name, candidate_name, party;
            anything else sorts by election_date.
        order: ASC or DESC; anything else sorts descending.

    Returns:
        Matching candidates.
    """
    query = select(Candidate)

    if election_date:
        query = query.where(Candidate.election_date == election_date)
    if race:
        query = query.where(Candidate.race_name == race)
    if party:
        if party == NO_PARTY_FILTER:
            query = query.where(or_(Candidate.party.is_(None), Candidate.party == ""))
        else:
            query = query.where(Candidate.party == party)
    if search:
        pattern = f"%{_escape_like(search)}%"
        query = query.where(
            or_(
                Candidate.candidate_name.ilike(pattern, escape="\\"),
                Candidate.race_name.ilike(pattern, escape="\\"),
            )
        )

    column = _SORTABLE_COLUMNS.get(order_by, Candidate.election_date)
    direction = order.upper() if order else "DESC"
    sort = column.asc() if direction == "ASC" else column.desc()
    query = query.order_by(sort, Candidate.candidate_name)

    result = await session.execute(query)
    return list(result.scalars().all())


async def get_candidate_filter_options(session: AsyncSession) -> CandidateFilterOptions:
    """Collect the distinct dates, races, and parties used to filter candidates.

    Args:
        session: Database session.

    Returns:
        CandidateFilterOptions with sorted distinct values.
    """
    dates = await session.execute(
        select(Candidate.election_date).distinct().order_by(Candidate.election_date.desc())
    )
    races = await session.execute(select(Candidate.race_name).distinct().order_by(Candidate.race_name))
    parties = await session.execute(
        select(Candidate.party)
        .where(Candidate.party.is_not(None), Candidate.party != "")
        .distinct()
        .order_by(Candidate.party)
    )
    return CandidateFilterOptions(
        election_dates=list(dates.scalars().all()),
        races=list(races.scalars().all()),
        parties=list(parties.scalars().all()),
    )


async def update_candidate_party(
    session: AsyncSession,
    candidate_id: uuid.UUID,
    party: str,
) -> Candidate | None:
    """Manually set a candidate's party; the only way to change it after creation.

    Args:
        session: Database session.
        candidate_id: Candidate to edit.
        party: New party; blank clears it.

    Returns:
        The updated candidate, or None if it does not exist.
    """
    candidate = await session.get(Candidate, candidate_id)
    if candidate is None:
        return None

    candidate.party = party.strip() or None
    await session.commit()
    logger.info(f"Set party of candidate {candidate_id} to {candidate.party!r}")
    return candidate


async def delete_candidate(session: AsyncSession, candidate_id: uuid.UUID) -> bool:
    """Delete a candidate; its results are removed by the foreign-key cascade.

    Args:
        session: Database session.
        candidate_id: Candidate to delete.

    Returns:
        True if a candidate was deleted.
    """
    candidate = await session.get(Candidate, candidate_id)
    if candidate is None:
        return False

    await session.delete(candidate)
    await session.commit()
    logger.info(f"Deleted candidate {candidate_id}")
    return True
