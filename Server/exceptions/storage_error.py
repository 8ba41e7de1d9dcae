"""
Research Library Server - Storage Error

Exception raised when the database or file storage cannot complete a write.
"""

from .library_error import LibraryError


class StorageError(LibraryError):
    """Underlying store unavailable or write failed."""
    status_code = 500
