"""Precinct import service — replace the precinct table from a precinct CSV."""

from contextlib import closing
from datetime import UTC, datetime
from typing import BinaryIO

from loguru import logger
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from election_importer.lib.importer import PRECINCT_FIELD_COUNT, iter_rows, open_text_stream, parse_precinct_row
from election_importer.models.precinct import Precinct
from election_importer.schemas.imports import ReplaceImportOutcome, RowError
from election_importer.services.import_service import (
    column_widths,
    import_transaction,
    insert_row,
    summarize_outcome,
)


async def import_precincts(session: AsyncSession, stream: BinaryIO) -> ReplaceImportOutcome:
    """Replace every stored precinct with the rows of a precinct CSV.

    The existing rows are deleted and the new ones inserted in the same
    transaction, so readers keep seeing the previous table until commit
    and a rolled-back import leaves it untouched.

    Args:
        session: Database session.
        stream: Readable byte stream of the CSV (header + 8 columns); closed on return.

    Returns:
        ReplaceImportOutcome with the imported count or the row errors.
    """
    outcome = ReplaceImportOutcome()
    widths = column_widths(Precinct)
    import_date = datetime.now(UTC)

    logger.info("Importing precincts (full replace)")

    with closing(stream):
        async with import_transaction(session, outcome.errors, label="Precinct"):
            with open_text_stream(stream) as text:
                await session.execute(delete(Precinct))
                for line, fields in iter_rows(text, skip_header=True):
                    record = parse_precinct_row(fields, widths)
                    if record is None:
                        outcome.errors.append(
                            RowError(
                                line=line,
                                message=f"Expected {PRECINCT_FIELD_COUNT} fields, found {len(fields)}",
                            )
                        )
                        continue
                    record["import_date"] = import_date
                    if await insert_row(session, Precinct, line, record, outcome.errors):
                        outcome.count += 1

    summarize_outcome(outcome, "precincts")
    logger.info(f"Precinct import finished: {outcome.message}")
    return outcome
