"""Import service — transaction policy shared by every file importer.

Each import runs as one transaction. Individual writes run in savepoints
so a rejected row is recorded and processing continues; at the end the
transaction commits only when no error was recorded. Setup failures and
database errors outside a savepoint abort the import and are reported as
a single file-level error. Anything else rolls back and propagates.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from loguru import logger
from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from election_importer.lib.importer import ImportAbortedError
from election_importer.models.base import Base
from election_importer.schemas.imports import ReplaceImportOutcome, RowError, VoterHistoryImportOutcome


def describe_db_error(exc: BaseException) -> str:
    """Return the driver-level message of a SQLAlchemy error, if any."""
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


def column_widths(model: type[Base]) -> dict[str, int | None]:
    """Map each column of a model to its declared string length (None if unbounded)."""
    return {column.name: getattr(column.type, "length", None) for column in model.__table__.columns}


@asynccontextmanager
async def import_transaction(
    session: AsyncSession,
    errors: list[RowError],
    *,
    label: str,
) -> AsyncIterator[None]:
    """Run an import body as one all-or-nothing transaction.

    On normal exit the transaction commits if ``errors`` is empty and rolls
    back otherwise. ``ImportAbortedError`` and ``SQLAlchemyError`` raised by
    the body are appended to ``errors`` as a file-level entry and suppressed.

    Args:
        session: Database session carrying the import transaction.
        errors: The outcome's error list; read for the commit decision.
        label: Import name used in log messages (e.g., "Precinct").

    Yields:
        None; the caller performs the import inside the context.
    """
    try:
        yield
        if not errors:
            await session.commit()
            logger.info(f"{label} import committed")
            return
    except (ImportAbortedError, SQLAlchemyError) as exc:
        message = str(exc) if isinstance(exc, ImportAbortedError) else describe_db_error(exc)
        logger.error(f"{label} import aborted: {message}")
        errors.append(RowError(message=message))
    except Exception:
        await session.rollback()
        logger.exception(f"{label} import failed unexpectedly; transaction rolled back")
        raise

    await session.rollback()
    logger.warning(f"{label} import rolled back with {len(errors)} error(s)")


async def insert_row(
    session: AsyncSession,
    model: type[Base],
    line: int,
    values: dict[str, Any],
    errors: list[RowError],
) -> bool:
    """Insert one row inside a savepoint, recording a failure as a row error.

    Args:
        session: Database session.
        model: ORM model to insert into.
        line: Source line number for error reporting.
        values: Column values.
        errors: Mutable error list.

    Returns:
        True if the row was inserted.
    """
    try:
        async with session.begin_nested():
            await session.execute(insert(model).values(**values))
    except SQLAlchemyError as exc:
        errors.append(RowError(line=line, message=f"Insert failed: {describe_db_error(exc)}"))
        return False
    return True


def summarize_outcome(outcome: ReplaceImportOutcome | VoterHistoryImportOutcome, noun: str) -> None:
    """Fill ``success`` and ``message`` once the import transaction has ended.

    A rolled-back import reports a zero count since nothing was persisted.
    """
    if outcome.errors:
        outcome.success = False
        outcome.count = 0
        outcome.message = f"Import failed with {len(outcome.errors)} error(s); no changes were made"
        return
    outcome.success = True
    outcome.message = f"Successfully imported {outcome.count} {noun}"
