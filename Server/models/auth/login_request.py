"""
Research Library Server - Login Request Model

Pydantic model for login endpoint request.
deviceId is optional at the schema level so that a missing value is
reported as a 400 by the login throttle rather than a 422 by FastAPI.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict


class LoginRequest(BaseModel):
    """Request model for login endpoint"""
    model_config = ConfigDict(str_strip_whitespace=True)

    username: str
    password: str
    deviceId: Optional[str] = None
