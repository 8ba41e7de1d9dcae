"""
Research Library Server - Database Base

Shared declarative base for all SQLAlchemy models.
This ensures all models share the same metadata and can reference each other.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base

# Create the shared declarative base
Base = declarative_base()


def NewId() -> str:
    """Generate a primary key for a new row (32 hex characters)"""
    return uuid.uuid4().hex


def UtcNow() -> datetime:
    """Timezone-aware current time used for column defaults"""
    return datetime.now(timezone.utc)


def AsUtc(value: datetime) -> datetime:
    """
    Attach UTC to a datetime read back from SQLite

    SQLite stores DateTime columns without an offset, so values come back naive
    even though they were written as UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
