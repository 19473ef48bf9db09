"""Import CLI commands for results, precinct, voter, and voter history files."""

import asyncio
from pathlib import Path

import typer

from election_importer.schemas.imports import (
    ReplaceImportOutcome,
    ResultsImportOutcome,
    RowError,
    VoterHistoryImportOutcome,
)

import_app = typer.Typer()

# Errors echoed to the terminal; the full list is in the log
_MAX_ERRORS_SHOWN = 50


def _echo_errors(errors: list[RowError]) -> None:
    """Print row errors, truncating long lists."""
    if not errors:
        return
    typer.echo(f"\nErrors ({len(errors)}):")
    for error in errors[:_MAX_ERRORS_SHOWN]:
        typer.echo(f"  {error}")
    if len(errors) > _MAX_ERRORS_SHOWN:
        typer.echo(f"  ... and {len(errors) - _MAX_ERRORS_SHOWN} more")


@import_app.command("results")
def import_results_cmd(
    file: Path = typer.Argument(..., help="Path to results CSV (named YYYYMMDD*.csv)", exists=True),  # noqa: B008
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show changed vote counts"),  # noqa: B008
) -> None:
    """Import an election results CSV."""
    outcome = asyncio.run(_import_results(file))

    typer.echo(f"\nResults import {'completed' if outcome.success else 'rolled back'}:")
    typer.echo(f"  Election date:  {outcome.election_date}")
    typer.echo(f"  Added:          {outcome.added}")
    typer.echo(f"  Updated:        {outcome.updated}")
    typer.echo(f"  Skipped:        {outcome.skipped}")
    if verbose:
        for mismatch in outcome.debug:
            typer.echo(f"  {mismatch}")
    _echo_errors(outcome.errors)
    if not outcome.success:
        raise typer.Exit(code=1)


async def _import_results(file_path: Path) -> ResultsImportOutcome:
    """Async implementation of results import."""
    from election_importer.core.config import get_settings
    from election_importer.core.database import dispose_engine, get_session_factory, init_engine
    from election_importer.services.results_import_service import import_results

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)

    try:
        factory = get_session_factory()
        async with factory() as session:
            typer.echo(f"Importing results from {file_path.name}...")
            return await import_results(session, file_path.open("rb"), file_path.name)
    finally:
        await dispose_engine()


def _report_replace(kind: str, outcome: ReplaceImportOutcome) -> None:
    typer.echo(f"\n{kind} import {'completed' if outcome.success else 'rolled back'}:")
    typer.echo(f"  {outcome.message}")
    _echo_errors(outcome.errors)
    if not outcome.success:
        raise typer.Exit(code=1)


@import_app.command("precincts")
def import_precincts_cmd(
    file: Path = typer.Argument(..., help="Path to precinct CSV file", exists=True),  # noqa: B008
) -> None:
    """Replace all precincts with the contents of a precinct CSV."""
    _report_replace("Precinct", asyncio.run(_import_precincts(file)))


async def _import_precincts(file_path: Path) -> ReplaceImportOutcome:
    """Async implementation of precinct import."""
    from election_importer.core.config import get_settings
    from election_importer.core.database import dispose_engine, get_session_factory, init_engine
    from election_importer.services.precinct_import_service import import_precincts

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)

    try:
        factory = get_session_factory()
        async with factory() as session:
            typer.echo(f"Importing precincts from {file_path.name}...")
            return await import_precincts(session, file_path.open("rb"))
    finally:
        await dispose_engine()


@import_app.command("voters")
def import_voters_cmd(
    file: Path = typer.Argument(..., help="Path to pipe-delimited voter extract", exists=True),  # noqa: B008
) -> None:
    """Replace all voters with the contents of a voter registration extract."""
    _report_replace("Voter", asyncio.run(_import_voters(file)))


async def _import_voters(file_path: Path) -> ReplaceImportOutcome:
    """Async implementation of voter import."""
    from election_importer.core.config import get_settings
    from election_importer.core.database import dispose_engine, get_session_factory, init_engine
    from election_importer.services.voter_import_service import import_voters

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)

    try:
        factory = get_session_factory()
        async with factory() as session:
            typer.echo(f"Importing voters from {file_path.name}...")
            return await import_voters(session, file_path.open("rb"))
    finally:
        await dispose_engine()


@import_app.command("voter-history")
def import_voter_history_cmd(
    file: Path = typer.Argument(..., help="Path to pipe-delimited voter history extract", exists=True),  # noqa: B008
    batch_size: int | None = typer.Option(None, "--batch-size", help="Records per batch", min=1),  # noqa: B008
) -> None:
    """Import voter participation history for registered voters."""
    outcome = asyncio.run(_import_voter_history(file, batch_size))

    typer.echo(f"\nVoter history import {'completed' if outcome.success else 'rolled back'}:")
    typer.echo(f"  Inserted:  {outcome.count}")
    typer.echo(f"  Skipped:   {outcome.skipped}")
    _echo_errors(outcome.errors)
    if not outcome.success:
        raise typer.Exit(code=1)


async def _import_voter_history(file_path: Path, batch_size: int | None) -> VoterHistoryImportOutcome:
    """Async implementation of voter history import."""
    from election_importer.core.config import get_settings
    from election_importer.core.database import dispose_engine, get_session_factory, init_engine
    from election_importer.services.voter_history_service import import_voter_history

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)

    try:
        factory = get_session_factory()
        async with factory() as session:
            typer.echo(f"Importing voter history from {file_path.name}...")
            return await import_voter_history(
                session,
                file_path.open("rb"),
                batch_size=batch_size or settings.voter_history_batch_size,
            )
    finally:
        await dispose_engine()
