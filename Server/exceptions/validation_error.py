"""
Research Library Server - Validation Error

Exception raised for missing or malformed input.
"""

from .library_error import LibraryError


class ValidationError(LibraryError):
    """Missing or malformed input."""
    status_code = 400
