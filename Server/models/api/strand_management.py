"""
Research Library Server - Strand Management API Models
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class CreateStrandRequest(BaseModel):
    """Request model for creating a strand"""
    model_config = ConfigDict(str_strip_whitespace=True)

    short: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: Optional[str] = None
    icon: Optional[str] = None


class UpdateStrandRequest(BaseModel):
    """Request model for updating a strand; omitted fields are left unchanged"""
    model_config = ConfigDict(str_strip_whitespace=True)

    short: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
