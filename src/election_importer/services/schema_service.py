"""Schema service — create the importer tables on first use."""

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

import election_importer.models  # noqa: F401
from election_importer.models.base import Base


async def ensure_schema(engine: AsyncEngine) -> bool:
    """Create any missing importer tables with their constraints and indexes.

    Existing tables are left as they are, so the call is safe to repeat.
    A failure is logged and reported through the return value; the caller
    can keep working against whatever schema already exists.

    Args:
        engine: Async engine for the target database.

    Returns:
        True if every table exists afterwards, False if creation failed.
    """
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)
    except SQLAlchemyError as exc:
        logger.error(f"Schema creation failed: {exc}")
        return False

    logger.info(f"Schema ready: {', '.join(sorted(Base.metadata.tables))}")
    return True
