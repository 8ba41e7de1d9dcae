"""
Research Library Server - Infrastructure Models Package

This package contains dataclass models for infrastructure components
like sessions, the login throttle and uploads.
"""

from models.infrastructure.stored_session import StoredSession
from models.infrastructure.throttle_state import (
    ThrottleState, MAX_ATTEMPTS, LOCKOUT_SECONDS, GRACE_PERIOD
)
from models.infrastructure.uploaded_pdf import UploadedPdf

__all__ = [
    'StoredSession',
    'ThrottleState',
    'MAX_ATTEMPTS',
    'LOCKOUT_SECONDS',
    'GRACE_PERIOD',
    'UploadedPdf',
]
