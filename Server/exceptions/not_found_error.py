"""
Research Library Server - Not Found Error
"""

from .library_error import LibraryError


class NotFoundError(LibraryError):
    """Target id does not resolve."""
    status_code = 404
