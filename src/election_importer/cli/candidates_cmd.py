"""Candidate management CLI commands."""

import asyncio
import uuid
from datetime import date

import typer

from election_importer.schemas.candidate import CandidateResponse

candidates_app = typer.Typer()


@candidates_app.command("list")
def list_cmd(
    election_date: str | None = typer.Option(None, "--date", help="Election date (YYYY-MM-DD)"),
    race: str | None = typer.Option(None, "--race", help="Exact race name"),
    party: str | None = typer.Option(None, "--party", help="Party, or 'none' for candidates without one"),
    search: str | None = typer.Option(None, "--search", help="Substring of candidate or race name"),
    order_by: str = typer.Option("election_date", "--order-by", help="election_date, race_name, candidate_name, party"),
    order: str = typer.Option("DESC", "--order", help="ASC or DESC"),
) -> None:
    """List candidates."""
    parsed_date: date | None = None
    if election_date:
        try:
            parsed_date = date.fromisoformat(election_date)
        except ValueError as e:
            raise typer.BadParameter(f"Invalid date: {election_date}", param_hint="--date") from e

    candidates = asyncio.run(
        _list_candidates(
            election_date=parsed_date,
            race=race,
            party=party,
            search=search,
            order_by=order_by,
            order=order,
        )
    )

    if not candidates:
        typer.echo("No candidates found.")
        return
    for candidate in candidates:
        typer.echo(
            f"{candidate.id}  {candidate.election_date}  {candidate.race_name}  "
            f"{candidate.candidate_name}  {candidate.party or '-'}"
        )
    typer.echo(f"\n{len(candidates)} candidate(s)")


async def _list_candidates(**filters: object) -> list[CandidateResponse]:
    """Async implementation of candidate listing."""
    from election_importer.core.config import get_settings
    from election_importer.core.database import dispose_engine, get_session_factory, init_engine
    from election_importer.services.candidate_service import list_candidates

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)

    try:
        factory = get_session_factory()
        async with factory() as session:
            candidates = await list_candidates(session, **filters)  # type: ignore[arg-type]
            return [CandidateResponse.model_validate(c) for c in candidates]
    finally:
        await dispose_engine()


@candidates_app.command("set-party")
def set_party_cmd(
    candidate_id: uuid.UUID = typer.Argument(..., help="Candidate id"),  # noqa: B008
    party: str = typer.Argument(..., help="New party; an empty string clears it"),
) -> None:
    """Manually set the party of a candidate."""
    candidate = asyncio.run(_set_party(candidate_id, party))
    if candidate is None:
        typer.echo(f"Candidate {candidate_id} not found.", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"{candidate.candidate_name} ({candidate.race_name}): party set to {candidate.party or '-'}")


async def _set_party(candidate_id: uuid.UUID, party: str) -> CandidateResponse | None:
    """Async implementation of the party edit."""
    from election_importer.core.config import get_settings
    from election_importer.core.database import dispose_engine, get_session_factory, init_engine
    from election_importer.services.candidate_service import update_candidate_party

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)

    try:
        factory = get_session_factory()
        async with factory() as session:
            candidate = await update_candidate_party(session, candidate_id, party)
            return CandidateResponse.model_validate(candidate) if candidate is not None else None
    finally:
        await dispose_engine()
