"""
Research Library Server - Conflict Error

Exception raised when a uniqueness rule would be violated
(duplicate username, duplicate strand acronym, strand still in use).
"""

from .library_error import LibraryError


class ConflictError(LibraryError):
    """Uniqueness or referential conflict."""
    status_code = 400
