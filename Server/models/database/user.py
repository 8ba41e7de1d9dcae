"""
Research Library Server - User Database Model

User model for authentication and authorization.
Stores user credentials and the role assignment.
"""

from sqlalchemy import Column, String, DateTime

from models.database.base import Base, NewId, UtcNow
from models.database.role import Role


class User(Base):
    """
    Users table - stores user credentials and profile info
    """
    __tablename__ = "users"

    user_id = Column(String(32), primary_key=True, default=NewId)
    username = Column(String, unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    full_name = Column(String, nullable=False)
    role = Column(String, nullable=False, default=Role.VIEWER.value)
    created_at = Column(DateTime(timezone=True), nullable=False, default=UtcNow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=UtcNow, onupdate=UtcNow)

    def ToDict(self) -> dict:
        """Public representation (never includes the password hash)"""
        return {
            "id": self.user_id,
            "username": self.username,
            "full_name": self.full_name,
            "role": self.role,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
