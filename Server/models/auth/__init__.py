"""
Research Library Server - Auth Models Package

This package contains Pydantic models for authentication endpoints.
"""

from models.auth.session_user import SessionUser
from models.auth.login_request import LoginRequest
from models.auth.login_response import LoginResponse
from models.auth.expiry_report_request import ExpiryReportRequest

__all__ = [
    'SessionUser',
    'LoginRequest',
    'LoginResponse',
    'ExpiryReportRequest',
]
