"""Database schema CLI commands."""

import asyncio

import typer
from loguru import logger

db_app = typer.Typer()


@db_app.command()
def init() -> None:
    """Create any missing importer tables."""
    if not asyncio.run(_init()):
        typer.echo("Schema creation failed; see the log for details.", err=True)
        raise typer.Exit(code=1)
    typer.echo("Database schema is ready.")


async def _init() -> bool:
    """Async implementation of schema creation."""
    from election_importer.core.config import get_settings
    from election_importer.core.database import dispose_engine, init_engine
    from election_importer.services.schema_service import ensure_schema

    settings = get_settings()
    engine = init_engine(settings.database_url, schema=settings.database_schema)

    try:
        logger.info("Ensuring database schema")
        return await ensure_schema(engine)
    finally:
        await dispose_engine()
