"""
Research Library Server - Expiry Report Request Model

Identity hints sent by the client after its session timed out.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict


class ExpiryReportRequest(BaseModel):
    """Request model for session expiry report endpoint"""
    model_config = ConfigDict(str_strip_whitespace=True)

    username: Optional[str] = None
    full_name: Optional[str] = None
