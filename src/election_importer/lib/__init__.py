"""Pure parsing libraries with no database access."""
