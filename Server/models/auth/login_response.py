"""
Research Library Server - Login Response Model

Pydantic model for login endpoint response.
"""

from pydantic import BaseModel

from models.auth.session_user import SessionUser


class LoginResponse(BaseModel):
    """Response model for login endpoint"""
    message: str
    user: SessionUser
