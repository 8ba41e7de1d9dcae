"""
Research Library Server - Authentication Error

Exception raised when the caller has no valid session or supplied bad credentials.
"""

from .library_error import LibraryError


class AuthenticationError(LibraryError):
    """No session, invalid session or bad credentials."""
    status_code = 401
