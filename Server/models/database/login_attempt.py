"""
Research Library Server - Login Attempt Database Model

Failed-login counter per (device, username) pair.
"""

from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint

from models.database.base import Base, UtcNow


class LoginAttempt(Base):
    """
    Login attempts table - at most one row per (device_id, username)
    """
    __tablename__ = "login_attempts"

    attempt_id = Column(Integer, primary_key=True, autoincrement=True)
    device_id = Column(String, nullable=False)
    username = Column(String, nullable=False)  # always lowercase
    attempts = Column(Integer, nullable=False, default=0)
    last_attempt = Column(DateTime(timezone=True), nullable=False, default=UtcNow)
    created_at = Column(DateTime(timezone=True), nullable=False, default=UtcNow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=UtcNow, onupdate=UtcNow)

    __table_args__ = (
        UniqueConstraint("device_id", "username", name="uq_login_attempts_device_user"),
    )
