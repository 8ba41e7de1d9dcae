"""
Research Library Server - Exceptions Package

Contains all exception classes raised by the server core.
Routes never build error responses by hand; server.py maps these
to JSON responses using their status_code.
"""

from .library_error import LibraryError
from .validation_error import ValidationError
from .conflict_error import ConflictError
from .authentication_error import AuthenticationError
from .authorization_error import AuthorizationError
from .not_found_error import NotFoundError
from .rate_limit_error import RateLimitError
from .storage_error import StorageError

__all__ = [
    'LibraryError',
    'ValidationError',
    'ConflictError',
    'AuthenticationError',
    'AuthorizationError',
    'NotFoundError',
    'RateLimitError',
    'StorageError'
]
