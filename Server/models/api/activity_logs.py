"""
Research Library Server - Activity Log API Models
"""

from typing import Any
from pydantic import BaseModel


class DeleteLogsRequest(BaseModel):
    """Request model for bulk log deletion; ids is validated by the manager"""
    ids: Any = None
