"""Voter import service — replace the voter table from a registration extract."""

import csv
from contextlib import closing
from datetime import UTC, datetime
from typing import BinaryIO

from loguru import logger
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from election_importer.lib.importer import iter_rows, open_text_stream, parse_voter_row
from election_importer.models.voter import Voter
from election_importer.schemas.imports import ReplaceImportOutcome, RowError
from election_importer.services.import_service import (
    column_widths,
    import_transaction,
    insert_row,
    summarize_outcome,
)

_PROGRESS_INTERVAL = 50_000


async def import_voters(session: AsyncSession, stream: BinaryIO) -> ReplaceImportOutcome:
    """Replace every stored voter with the rows of a pipe-delimited extract.

    Args:
        session: Database session.
        stream: Readable byte stream of the extract; closed on return.

    Returns:
        ReplaceImportOutcome with the imported count or the row errors.
    """
    outcome = ReplaceImportOutcome()
    widths = column_widths(Voter)
    import_date = datetime.now(UTC)

    logger.info("Importing voter registrations (full replace)")

    with closing(stream):
        async with import_transaction(session, outcome.errors, label="Voter"):
            with open_text_stream(stream) as text:
                await session.execute(delete(Voter))
                rows = iter_rows(text, delimiter="|", skip_header=True, quoting=csv.QUOTE_NONE)
                for line, fields in rows:
                    record, error = parse_voter_row(fields, widths)
                    if error is not None:
                        outcome.errors.append(RowError(line=line, message=error))
                        continue
                    record["import_date"] = import_date
                    if await insert_row(session, Voter, line, record, outcome.errors):
                        outcome.count += 1
                        if outcome.count % _PROGRESS_INTERVAL == 0:
                            logger.info(f"Voter import progress: {outcome.count} rows written")

    summarize_outcome(outcome, "voters")
    logger.info(f"Voter import finished: {outcome.message}")
    return outcome
