"""
Research Library Server - Settings API Models

Pydantic models for settings management endpoints.
"""

from typing import Optional
from pydantic import BaseModel, Field


class SettingsUpdateRequest(BaseModel):
    session_idle_minutes: Optional[int] = Field(default=None, gt=0)
    log_retention_days: Optional[int] = Field(default=None, gt=0)
    activity_log_page_size: Optional[int] = Field(default=None, gt=0, le=1000)
