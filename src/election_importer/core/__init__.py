"""Core configuration, database, and logging."""
