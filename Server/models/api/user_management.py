"""
Research Library Server - User Management API Models

Pydantic models for user management endpoints.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from models.database.role import Role


class CreateUserRequest(BaseModel):
    """Request model for creating a new user"""
    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(min_length=3)
    password: str = Field(min_length=6)
    full_name: str = Field(min_length=1)
    role: Role = Role.VIEWER


class UpdateUserRequest(BaseModel):
    """
    Request model for updating a user

    Which of these fields are applied depends on who is editing whom;
    see policy.EditableUserFields.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    full_name: Optional[str] = None
    username: Optional[str] = None
    role: Optional[Role] = None
    password: Optional[str] = Field(default=None, min_length=6)
    currentPassword: Optional[str] = None


class DeleteUserRequest(BaseModel):
    """Request model for deleting a user (actor's own password)"""
    currentPassword: Optional[str] = None
