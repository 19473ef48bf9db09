"""Election results import service — reconcile a results CSV with stored vote counts."""

import uuid
from contextlib import closing
from datetime import date
from typing import BinaryIO

from loguru import logger
from sqlalchemy import insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from election_importer.lib.importer import (
    election_date_from_filename,
    iter_rows,
    open_text_stream,
    parse_result_row,
)
from election_importer.lib.importer.results import ResultRow
from election_importer.models.result import ElectionResult
from election_importer.schemas.imports import ResultsImportOutcome, RowError, VoteMismatch
from election_importer.services.candidate_service import resolve_candidate
from election_importer.services.import_service import describe_db_error, import_transaction

INVALID_COLUMNS_MESSAGE = "Row skipped: Invalid number of columns"


async def import_results(
    session: AsyncSession,
    stream: BinaryIO,
    filename: str,
    *,
    today: date | None = None,
) -> ResultsImportOutcome:
    """Import an election results CSV.

    Each row is reconciled against the stored result for the same
    candidate, precinct, and election date: new rows are inserted, rows
    with a changed vote count are updated, identical rows are skipped.
    The file is imported as one transaction that commits only when no
    error was recorded.

    Args:
        session: Database session.
        stream: Readable byte stream of the CSV; closed on return.
        filename: Uploaded filename; a ``YYYYMMDD`` prefix sets the election date.
        today: Election date used when the filename carries none.

    Returns:
        ResultsImportOutcome with counts, row errors, and vote-change records.
    """
    election_date = election_date_from_filename(filename, today)
    outcome = ResultsImportOutcome(filename=filename, election_date=election_date)
    candidates: dict[tuple[str, str], uuid.UUID] = {}

    logger.info(f"Importing election results from {filename} (election date {election_date.isoformat()})")

    with closing(stream):
        async with import_transaction(session, outcome.errors, label="Results"):
            with open_text_stream(stream) as text:
                for line, fields in iter_rows(text):
                    row = parse_result_row(line, fields)
                    if row is None:
                        outcome.errors.append(RowError(line=line, message=INVALID_COLUMNS_MESSAGE))
                        continue
                    if row.is_total:
                        continue
                    await _reconcile_row(session, row, election_date, filename, candidates, outcome)

    logger.info(
        f"Results import of {filename} finished: {outcome.added} added, {outcome.updated} updated, "
        f"{outcome.skipped} skipped, {len(outcome.errors)} errors"
    )
    return outcome


def _record_label(row: ResultRow) -> str:
    return f"Race={row.race}, Option={row.candidate}, Precinct={row.precinct_number}"


async def _reconcile_row(
    session: AsyncSession,
    row: ResultRow,
    election_date: date,
    filename: str,
    candidates: dict[tuple[str, str], uuid.UUID],
    outcome: ResultsImportOutcome,
) -> None:
    """Insert, update, or skip one result row, recording the outcome."""
    key = (row.candidate, row.race)
    candidate_id = candidates.get(key)
    if candidate_id is None:
        try:
            candidate_id = await resolve_candidate(session, row.candidate, row.race, election_date)
        except SQLAlchemyError as exc:
            logger.warning(f"Line {row.line}: candidate creation failed: {describe_db_error(exc)}")
            outcome.errors.append(RowError(line=row.line, message=f"Error inserting record: {_record_label(row)}"))
            return
        candidates[key] = candidate_id

    result = await session.execute(
        select(ElectionResult.id, ElectionResult.votes).where(
            ElectionResult.candidate_id == candidate_id,
            ElectionResult.election_date == election_date,
            ElectionResult.precinct_number == row.precinct_number,
        )
    )
    existing = result.one_or_none()

    if existing is None:
        try:
            async with session.begin_nested():
                await session.execute(
                    insert(ElectionResult).values(
                        election_date=election_date,
                        candidate_id=candidate_id,
                        precinct_name=row.precinct_name,
                        precinct_number=row.precinct_number,
                        votes=row.votes,
                        filename=filename,
                    )
                )
        except SQLAlchemyError as exc:
            logger.warning(f"Line {row.line}: result insert failed: {describe_db_error(exc)}")
            outcome.errors.append(RowError(line=row.line, message=f"Error inserting record: {_record_label(row)}"))
            return
        outcome.added += 1
        return

    if existing.votes == row.votes:
        outcome.skipped += 1
        return

    try:
        async with session.begin_nested():
            await session.execute(
                update(ElectionResult)
                .where(ElectionResult.id == existing.id)
                .values(votes=row.votes, precinct_name=row.precinct_name, filename=filename)
            )
    except SQLAlchemyError as exc:
        logger.warning(f"Line {row.line}: result update failed: {describe_db_error(exc)}")
        outcome.errors.append(RowError(line=row.line, message=f"Error updating record: {_record_label(row)}"))
        return

    mismatch = VoteMismatch(
        race=row.race,
        candidate=row.candidate,
        precinct_number=row.precinct_number,
        old_votes=existing.votes,
        new_votes=row.votes,
    )
    logger.debug(str(mismatch))
    outcome.debug.append(mismatch)
    outcome.updated += 1
