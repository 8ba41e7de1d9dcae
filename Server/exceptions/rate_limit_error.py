"""
Research Library Server - Rate Limit Error

Exception raised while a login lockout is active.
"""

from .library_error import LibraryError


class RateLimitError(LibraryError):
    """Login lockout active; retry_after is in whole seconds."""
    status_code = 429

    def __init__(self, message: str, retry_after: int):
        super().__init__(message)
        self.retry_after = retry_after
