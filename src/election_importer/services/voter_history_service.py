"""Voter history service — additive import of participation records."""

import uuid
from contextlib import closing
from datetime import UTC, datetime
from typing import BinaryIO

from loguru import logger
from sqlalchemy import insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from election_importer.lib.importer import ImportAbortedError, open_text_stream
from election_importer.lib.voter_history import parse_voter_history_rows
from election_importer.models.voter import Voter
from election_importer.models.voter_history import VoterHistory
from election_importer.schemas.imports import RowError, VoterHistoryImportOutcome
from election_importer.services.import_service import (
    column_widths,
    describe_db_error,
    import_transaction,
    summarize_outcome,
)

# asyncpg has a hard limit of 32767 query parameters
_IN_CLAUSE_BATCH = 5000

# Seven bound parameters per inserted row
_INSERT_CHUNK = 4000

NO_VOTERS_MESSAGE = "No voters found. Import voter registrations before voter history."


async def import_voter_history(
    session: AsyncSession,
    stream: BinaryIO,
    *,
    batch_size: int = 1000,
) -> VoterHistoryImportOutcome:
    """Import a pipe-delimited voter history extract.

    Rows for voters that are not registered, and rows whose
    voter_history_id is already stored or repeated in the file, are
    skipped; their election date is not validated. Accepted rows are
    written in multi-row INSERT batches. The import commits only when no
    row or batch error was recorded.

    Args:
        session: Database session.
        stream: Readable byte stream of the extract; closed on return.
        batch_size: Rows per batch; a batch larger than the driver parameter
            limit allows is written as several INSERTs in one savepoint.

    Returns:
        VoterHistoryImportOutcome with inserted and skipped counts.
    """
    outcome = VoterHistoryImportOutcome()
    import_date = datetime.now(UTC)
    widths = column_widths(VoterHistory)

    logger.info(f"Importing voter history (batch size {batch_size})")

    with closing(stream):
        async with import_transaction(session, outcome.errors, label="Voter history"):
            voter_ids = await _load_voter_ids(session)
            if not voter_ids:
                raise ImportAbortedError(NO_VOTERS_MESSAGE)
            logger.info(f"Loaded {len(voter_ids)} registered voter ids")

            seen_ids: set[str] = set()
            batch: list[dict] = []
            with open_text_stream(stream) as text:
                for record in parse_voter_history_rows(text, widths):
                    parse_error = record.pop("_parse_error", None)
                    date_error = record.pop("_date_error", None)
                    if parse_error:
                        outcome.errors.append(RowError(line=record["line"], message=parse_error))
                        continue

                    # Orphans and repeats are expected in state extracts, not errors
                    if record["state_voter_id"] not in voter_ids or record["voter_history_id"] in seen_ids:
                        outcome.skipped += 1
                        continue
                    if date_error:
                        outcome.errors.append(RowError(line=record["line"], message=date_error))
                        continue
                    seen_ids.add(record["voter_history_id"])

                    batch.append(record)
                    if len(batch) >= batch_size:
                        await _flush_batch(session, batch, import_date, outcome)
                        batch = []

                if batch:
                    await _flush_batch(session, batch, import_date, outcome)

    summarize_outcome(outcome, "voter history records")
    if outcome.success:
        outcome.message += f" ({outcome.skipped} skipped)"
    logger.info(f"Voter history import finished: {outcome.message}")
    return outcome


async def _load_voter_ids(session: AsyncSession) -> set[str]:
    """Snapshot every registered state voter id."""
    result = await session.scalars(select(Voter.state_voter_id))
    return set(result.all())


async def _existing_history_ids(session: AsyncSession, history_ids: list[str]) -> set[str]:
    """Return which of the given voter_history_ids are already stored."""
    existing: set[str] = set()
    for i in range(0, len(history_ids), _IN_CLAUSE_BATCH):
        chunk = history_ids[i : i + _IN_CLAUSE_BATCH]
        result = await session.scalars(
            select(VoterHistory.voter_history_id).where(VoterHistory.voter_history_id.in_(chunk))
        )
        existing.update(result.all())
    return existing


async def _flush_batch(
    session: AsyncSession,
    records: list[dict],
    import_date: datetime,
    outcome: VoterHistoryImportOutcome,
) -> None:
    """Write one batch with multi-row INSERTs inside a single savepoint.

    Records whose voter_history_id is already stored are counted as
    skipped. A failed INSERT is recorded as one error for the batch.

    Args:
        session: Database session.
        records: Validated record dicts, in file order.
        import_date: Timestamp stamped on every inserted row.
        outcome: Outcome updated in place.
    """
    existing = await _existing_history_ids(session, [r["voter_history_id"] for r in records])
    values = [
        {
            "id": uuid.uuid4(),
            "voter_history_id": r["voter_history_id"],
            "state_voter_id": r["state_voter_id"],
            "county_code": r["county_code"],
            "county_code_voting": r["county_code_voting"],
            "election_date": r["election_date"],
            "import_date": import_date,
        }
        for r in records
        if r["voter_history_id"] not in existing
    ]
    outcome.skipped += len(records) - len(values)
    if not values:
        return

    last_line = records[-1]["line"]
    try:
        async with session.begin_nested():
            for i in range(0, len(values), _INSERT_CHUNK):
                await session.execute(insert(VoterHistory).values(values[i : i + _INSERT_CHUNK]))
    except SQLAlchemyError as exc:
        outcome.errors.append(
            RowError(message=f"Batch insert failed near line {last_line}: {describe_db_error(exc)}")
        )
        return

    outcome.count += len(values)
    logger.debug(f"Inserted {len(values)} voter history rows through line {last_line}")
