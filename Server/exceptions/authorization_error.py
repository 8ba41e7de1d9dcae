"""
Research Library Server - Authorization Error

Exception raised when an authenticated caller is not allowed to perform an action.
"""

from .library_error import LibraryError


class AuthorizationError(LibraryError):
    """Authenticated but forbidden."""
    status_code = 403
