"""
Research Library Server - Session User Model

Snapshot of a user embedded in a session at login time. It is never
refreshed from the users table, so a rename only shows up after the
session is destroyed and re-created.
"""

from pydantic import BaseModel


class SessionUser(BaseModel):
    """Caller identity stored in a session"""
    id: str
    username: str
    full_name: str
    role: str
