"""Pydantic schemas for importer outcomes and candidate queries."""
