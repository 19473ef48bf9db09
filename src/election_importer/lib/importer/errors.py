"""Importer exception types."""


class ImportAbortedError(Exception):
    """A setup-level failure that aborts an import before or during reading.

    Raised for unreadable or undecodable files and for unmet preconditions
    (e.g., an empty voters table before a voter history import). Importers
    catch it at their boundary, roll back, and report it as a single error.
    """
