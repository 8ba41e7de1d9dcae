"""
Research Library Server - Session Record Database Model

Persisted session blobs for DatabaseSessionStore. The data column is opaque
JSON text owned by the session manager.
"""

from sqlalchemy import Column, String, DateTime, Text

from models.database.base import Base


class SessionRecord(Base):
    """
    Sessions table
    """
    __tablename__ = "sessions"

    session_id = Column(String, primary_key=True)
    data = Column(Text, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
