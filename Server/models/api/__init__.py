"""
Research Library Server - API Models Package

This package contains Pydantic models for all API endpoints.
"""

from models.api.user_management import (
    CreateUserRequest,
    UpdateUserRequest,
    DeleteUserRequest
)
from models.api.strand_management import (
    CreateStrandRequest,
    UpdateStrandRequest
)
from models.api.paper_management import (
    Author,
    PaperForm,
    ParseAuthors,
    ParseKeywords,
    ParseFlag
)
from models.api.activity_logs import DeleteLogsRequest
from models.api.settings import SettingsUpdateRequest

__all__ = [
    'CreateUserRequest',
    'UpdateUserRequest',
    'DeleteUserRequest',
    'CreateStrandRequest',
    'UpdateStrandRequest',
    'Author',
    'PaperForm',
    'ParseAuthors',
    'ParseKeywords',
    'ParseFlag',
    'DeleteLogsRequest',
    'SettingsUpdateRequest',
]
