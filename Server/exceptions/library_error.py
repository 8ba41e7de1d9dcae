"""
Research Library Server - Base Error

Base exception class for all errors raised by the server core.
Every subclass carries the HTTP status code it maps to.
"""


class LibraryError(Exception):
    """Base exception for server errors."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
