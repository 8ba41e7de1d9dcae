"""
Research Library Server - Stored Session Model

Dataclass for a session blob held by a session store.
"""

from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Optional


@dataclass
class StoredSession:
    """An opaque session blob with its idle expiry"""
    session_id: str
    data: str
    expires_at_utc: datetime

    def IsExpired(self, now: Optional[datetime] = None) -> bool:
        """Check if session has expired"""
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at_utc
