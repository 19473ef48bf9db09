"""Service layer: importers, candidate resolution, and schema management."""
