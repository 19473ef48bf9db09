"""Flat-file election, precinct, and voter data importer."""

__version__ = "0.1.0"
