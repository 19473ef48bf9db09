"""Typer CLI root application."""

import typer

from election_importer.core.config import get_settings
from election_importer.core.logging import setup_logging

app = typer.Typer(name="election-importer", help="Election results, precinct, and voter data importer")


@app.callback()
def _main_callback() -> None:
    """Initialize logging for all CLI commands."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)


def _register_subcommands() -> None:
    """Register all CLI subcommand groups."""
    from election_importer.cli.candidates_cmd import candidates_app
    from election_importer.cli.db_cmd import db_app
    from election_importer.cli.import_cmd import import_app

    app.add_typer(db_app, name="db", help="Database schema commands")
    app.add_typer(import_app, name="import", help="Data import commands")
    app.add_typer(candidates_app, name="candidates", help="Candidate management commands")


_register_subcommands()
